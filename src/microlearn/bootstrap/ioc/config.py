from dishka import Provider, Scope, from_context, provide

from microlearn.application.identity import SessionSettings
from microlearn.bootstrap.configs import AuthConfig, MongoDBConfig, WatiConfig


class AppConfigProvider(Provider):
    scope = Scope.APP

    database_config = from_context(MongoDBConfig)
    wati_config = from_context(WatiConfig)
    auth_config = from_context(AuthConfig)

    @provide
    def get_session_settings(self, config: AuthConfig) -> SessionSettings:
        return SessionSettings(ttl_seconds=config.session_ttl_seconds)
