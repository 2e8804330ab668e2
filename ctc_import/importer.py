"""The import run: authenticate, pick a folder, render and upload."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from .config import Config, load_config, save_config
from .prompts import Prompter, highlight
from .remarkable.auth import get_device_token
from .remarkable.cloud import CloudClient
from .remarkable.models import Directory, DocumentMetadata
from .render import PuzzleRenderer

logger = logging.getLogger(__name__)


def ensure_device_token(
    config: Config, prompter: Prompter
) -> tuple[Config, str]:
    """Register the device unless the config already has a token.

    Returns:
        The config (unchanged if a token was stored) and the device token.
    """
    if config.device_token:
        logger.info("Device token exists")
        return config, config.device_token

    logger.info("No device token found")
    device_token = get_device_token(prompter.one_time_code())
    return config.model_copy(update={"device_token": device_token}), device_token


def select_parent_directory(
    config: Config, cloud: CloudClient, prompter: Prompter
) -> tuple[Config, Directory]:
    """Let the user pick the upload folder.

    When a folder is already stored the user is asked whether to switch;
    the remote listing is only fetched when a choice is needed.

    Returns:
        The config (unchanged if the stored folder is kept) and the folder.
    """
    if config.parent is not None and not prompter.should_reselect(config.parent):
        return config, config.parent

    directories = cloud.list_directories()
    parent = prompter.choose_directory(directories)
    typer.echo(f"Selected parent directory: {highlight(parent.path)}")
    return config.model_copy(update={"parent": parent}), parent


def import_puzzle(
    puzzle_url: str,
    *,
    config_path: Path,
    renderer: PuzzleRenderer,
    prompter: Prompter,
) -> DocumentMetadata:
    """Render a puzzle page and upload it to the reMarkable cloud.

    The config file is rewritten after device registration and after a
    new parent folder is chosen.

    Args:
        puzzle_url: URL of the puzzle page.
        config_path: Location of the config file.
        renderer: Produces the PDF for the page.
        prompter: Answers the interactive questions.

    Returns:
        Metadata of the uploaded document.
    """
    config = load_config(config_path)

    updated, device_token = ensure_device_token(config, prompter)
    if updated is not config:
        save_config(updated, config_path)
        logger.info("Device token stored")
        config = updated

    cloud = CloudClient.connect(device_token)

    updated, parent = select_parent_directory(config, cloud, prompter)
    if updated is not config:
        save_config(updated, config_path)

    logger.info("Fetching puzzle...")
    puzzle = renderer.render(puzzle_url)
    typer.echo(f"Found puzzle title: {highlight(puzzle.title)}")

    logger.info("Uploading...")
    document = cloud.upload_pdf(puzzle.pdf, puzzle.title, parent.id)

    typer.echo(
        f"Puzzle synced with reMarkable: {highlight(parent.path + puzzle.title)}"
    )
    return document
