from dependency_injector import containers, providers

from auditionapi.config import Settings
from auditionapi.services.identity_admin_client import IdentityAdminClient
from auditionapi.services.payos_client import PayOSClient
from auditionapi.services.storage_service import StorageService


class Container(containers.DeclarativeContainer):
    """Application container: settings and clients for external services.

    Database-bound services are built per request in ``auditionapi.deps``.
    """

    wiring_config = containers.WiringConfiguration(
        modules=["auditionapi.deps"],
    )

    config = providers.Singleton(Settings)

    storage_service = providers.Singleton(StorageService, settings=config)
    payos_client = providers.Singleton(PayOSClient, settings=config)
    identity_admin = providers.Singleton(IdentityAdminClient, settings=config)
