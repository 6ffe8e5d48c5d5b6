"""Engine construction for CLI commands from the global options."""

from pathlib import Path

import typer

from boardroom.application.factory import Boardroom, BoardroomFactory
from boardroom.application.logging_config import configure_logging
from boardroom.application.settings import BoardroomSettings


def load_settings(ctx: typer.Context) -> BoardroomSettings:
    opts = ctx.obj or {}
    config = opts.get("config")
    settings = BoardroomSettings.load_from_file(Path(config)) if config else BoardroomSettings()
    configure_logging("DEBUG" if opts.get("verbose") else "WARNING", settings.log_json)
    return settings


def build_boardroom(ctx: typer.Context) -> Boardroom:
    opts = ctx.obj or {}
    factory = BoardroomFactory(load_settings(ctx))
    if opts.get("offline"):
        return factory.create(llm=None)
    return factory.create()
