"""API dependencies."""

from typing import Annotated

from fastapi import Depends

from formupload.config import Settings, get_settings
from formupload.services.form.incoming import FormOptions


def get_form_options(
    settings: Annotated[Settings, Depends(get_settings)],
) -> FormOptions:
    """Fresh FormOptions per request; the upload directory must exist."""
    options = settings.form_options()
    options.upload_dir.mkdir(parents=True, exist_ok=True)
    return options


SettingsDep = Annotated[Settings, Depends(get_settings)]
FormOptionsDep = Annotated[FormOptions, Depends(get_form_options)]
