from __future__ import annotations

import click

EMPTY_VALUE_MESSAGE = "Value cannot be empty."
PASSWORD_MISMATCH_MESSAGE = "Keyring passwords do not match. Please try again."


def prompt_required_value(prompt: str, hidden: bool = False) -> str:
    """Prompt until a non-blank value is entered; returns it stripped."""
    while True:
        value = click.prompt(
            prompt,
            default="",
            show_default=False,
            hide_input=hidden,
            prompt_suffix=": ",
        ).strip()
        if value:
            return value
        click.echo(EMPTY_VALUE_MESSAGE, err=True)


def prompt_runtime_keyring_password() -> str:
    return prompt_required_value("Keyring password", hidden=True)


def prompt_new_keyring_password() -> str:
    while True:
        created = prompt_required_value("Create keyring password", hidden=True)
        confirmed = prompt_required_value(
            "Confirm keyring password", hidden=True
        )
        if created == confirmed:
            return created
        click.echo(PASSWORD_MISMATCH_MESSAGE, err=True)
