from abc import ABC

import click

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.logging import get_logger


class BaseService(ABC):
    """Base service class with common functionality."""

    def __init__(self, broker: BrokerClient):
        self.broker = broker
        self.logger = get_logger(self.__class__.__name__)

    def echo(self, text: str = "", nl: bool = True):
        """Write operator-facing output to stdout."""
        click.echo(text, nl=nl)
