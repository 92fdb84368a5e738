from fastapi import Request

from keyserver.application.key_server import KeyServer
from keyserver.domain.ports.notifier import NotifierPort
from keyserver.settings import Settings


# These are set in keyserver.main lifespan()
def get_key_server(request: Request) -> KeyServer:
    return request.app.state.key_server


def get_notifier(request: Request) -> NotifierPort:
    return request.app.state.notifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
