"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, moteur SQLAlchemy, service de workflow) une seule
fois ; les routes y accèdent via les dépendances FastAPI de `api.deps`.
"""

from homepage_cms.core.settings import Settings, get_settings
from homepage_cms.infra.repo.db import create_schema, get_engine, get_session_factory
from homepage_cms.services.content_workflow import ContentWorkflowService


class Container:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.engine = get_engine(self.settings.DATABASE_URL, echo=self.settings.DATABASE_ECHO)
        if self.settings.AUTO_CREATE_SCHEMA:
            create_schema(self.engine)
        self.session_factory = get_session_factory(self.engine)
        self.workflow = ContentWorkflowService(
            self.session_factory,
            allowed_tenants=self.settings.ALLOWED_TENANTS,
            bulk_max_items=self.settings.BULK_UPDATE_MAX_ITEMS,
        )
        self.storage_backend = self.engine.dialect.name


container = Container()
