"""
Configuration data model for gitpm.

Defines the structure of .pm.json and ~/.config/gitpm/config.json, with
validation via Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field


class PmConfig(BaseModel):
    """
    gitpm settings.

    Naming settings only affect tasks created after they change: file names
    are frozen at creation, and loading reads the id back from whatever
    width the file was written with.
    """

    id_width: int = Field(
        default=3,
        ge=1,
        le=9,
        description="Minimum digits of the zero-padded id in task file names",
    )
    slug_max_length: int = Field(
        default=50,
        ge=8,
        description="Maximum length of the title part of task file names",
    )
    editor: str | None = Field(
        default=None,
        description="Editor command for 'pm edit' (falls back to $EDITOR, then vim)",
    )
    show_archived: bool = Field(
        default=False,
        description="Include archived tasks in the board view",
    )

    model_config = ConfigDict(extra="ignore")
