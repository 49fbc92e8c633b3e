import asyncio
import sys

import click

from . import __version__
from .config import AppConfig, ConfigError, ConfigManager, FilterConfig, FirstRunPolicy


def _load_config(config_manager: ConfigManager) -> AppConfig:
    """Load configuration or exit with an error message"""
    try:
        return config_manager.load()
    except ConfigError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


def _mask(token: str) -> str:
    if len(token) <= 15:
        return "*" * len(token)
    return f"{token[:10]}...{token[-5:]}"


config_dir_option = click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directorio de configuración y datos"
)


@click.group(name="apd-monitor", help="Monitor de ofertas APD con avisos por Telegram")
def cli():
    pass


@cli.command(help="Mostrar versión")
def version():
    click.echo(f"apd-monitor {__version__}")


@cli.command(help="Crear config.json de forma interactiva")
@config_dir_option
def init(config_dir):
    config_manager = ConfigManager(config_dir, environ={})

    if config_manager.exists():
        if not click.confirm(f"Ya existe {config_manager.config_path}. ¿Sobrescribir?", default=False):
            click.echo("Cancelado")
            return

    click.echo("🚀 Monitor de ofertas APD - configuración inicial\n")
    bot_token = click.prompt("Bot Token (de @BotFather)", type=str)
    chat_id = click.prompt("Chat ID por defecto (vacío para omitir)", type=str, default="")
    district = click.prompt("Distrito", type=str, default="general pueyrredon")
    status = click.prompt("Estado", type=str, default="Publicada")
    rows = click.prompt("Máximo de ofertas por consulta", type=int, default=100)
    interval = click.prompt("Intervalo de chequeo (minutos)", type=int, default=30)
    policy = click.prompt(
        "Primera ejecución",
        type=click.Choice([p.value for p in FirstRunPolicy]),
        default=FirstRunPolicy.SILENT.value
    )

    config = AppConfig(
        bot_token=bot_token,
        chat_id=chat_id.strip() or None,
        filters=FilterConfig(rows=rows, district=district, status=status),
        fetch_interval_minutes=interval,
        first_run_policy=FirstRunPolicy(policy)
    )
    config_manager.save(config)
    click.echo(f"\n✅ Configuración guardada en: {config_manager.config_path}")
    click.echo("Usá 'apd-monitor run' para iniciar el servicio")


@cli.command(help="Mostrar la configuración efectiva")
@config_dir_option
def config(config_dir):
    config_manager = ConfigManager(config_dir)
    cfg = _load_config(config_manager)

    click.echo("📋 Configuración actual:\n")
    click.echo(f"  Bot Token: {_mask(cfg.bot_token)}")
    click.echo(f"  Chat ID: {cfg.chat_id if cfg.chat_id is not None else '-'}")
    click.echo(f"  Admin Chat ID: {cfg.admin_chat_id if cfg.admin_chat_id is not None else '-'}")
    click.echo(f"  Distrito: {cfg.filters.district}")
    click.echo(f"  Estado: {cfg.filters.status}")
    click.echo(f"  Filas: {cfg.filters.rows}")
    click.echo(f"  Intervalo: {cfg.fetch_interval_minutes} min")
    click.echo(f"  Primera ejecución: {cfg.first_run_policy.value}")
    click.echo(f"  Estado guardado en: {config_manager.state_path}")
    click.echo(f"  Suscriptores en: {config_manager.subscribers_path}")


@cli.command(help="Iniciar el servicio de monitoreo")
@config_dir_option
@click.option("--web-port", type=int, default=None, help="Puerto del endpoint de salud (por defecto PORT o 3000)")
@click.option("--no-web", is_flag=True, help="No iniciar el endpoint de salud")
def run(config_dir, web_port, no_web):
    config_manager = ConfigManager(config_dir)
    cfg = _load_config(config_manager)

    from .app import Application, setup_logging
    log_dir = config_manager.config_dir / "logs"
    setup_logging(log_dir)

    click.echo("🚀 Iniciando monitor de ofertas...")
    click.echo(f"   Distrito: {cfg.filters.district} / Estado: {cfg.filters.status}")
    click.echo(f"   Intervalo: {cfg.fetch_interval_minutes} min")
    click.echo(f"   Logs: {log_dir}\n")

    app = Application(config=cfg, config_manager=config_manager)

    if not no_web:
        from .web import HealthServer
        HealthServer(port=web_port or cfg.web_port, status_provider=app.get_status).start()

    app.run()


@cli.command(help="Ejecutar un único chequeo y salir")
@config_dir_option
def check(config_dir):
    config_manager = ConfigManager(config_dir)
    cfg = _load_config(config_manager)

    from .app import Application, setup_logging
    setup_logging()

    app = Application(config=cfg, config_manager=config_manager)
    result = asyncio.run(app.run_once())
    if result is None or result.failed:
        click.echo(f"❌ Chequeo fallido: {app.get_status().last_error}", err=True)
        sys.exit(1)
    click.echo(f"✅ {result.fetched} ofertas, {result.new} nuevas, {result.notified} mensajes entregados")


@cli.command(name="force-send", help="Enviar todas las ofertas actuales como TEST al chat por defecto")
@config_dir_option
def force_send(config_dir):
    config_manager = ConfigManager(config_dir)
    cfg = _load_config(config_manager)

    from .app import Application, setup_logging
    setup_logging()

    app = Application(config=cfg, config_manager=config_manager)
    try:
        sent = asyncio.run(app.force_send())
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    click.echo(f"✅ {sent} mensajes entregados")


def main():
    cli()


if __name__ == "__main__":
    main()
