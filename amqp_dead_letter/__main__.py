from .main import cli

cli(prog_name="amqp-dead-letter")
