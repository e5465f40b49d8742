import logging

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from microlearn.bootstrap.configs import (
    AuthConfig,
    Config,
    MongoDBConfig,
    WatiConfig,
)
from microlearn.bootstrap.ioc.application import ApplicationProvider
from microlearn.bootstrap.ioc.config import AppConfigProvider
from microlearn.bootstrap.ioc.infrastructure import InfrastructureProvider

logger = logging.getLogger(__name__)


def fastapi_container(
        config: Config,
) -> AsyncContainer:
    logger.info("Fastapi DI setup")

    return make_async_container(
        AppConfigProvider(),
        InfrastructureProvider(),
        ApplicationProvider(),
        FastapiProvider(),
        context={
            MongoDBConfig: config.database,
            WatiConfig: config.wati,
            AuthConfig: config.auth,
        },
    )
