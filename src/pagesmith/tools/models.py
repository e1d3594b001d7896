from typing import Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pagesmith.generation.validator import GeneratedToolDraft


DEFAULT_ICON = "🔧"
PRESET_PLACEHOLDER_SCRIPT = "/* AI Preset */"


class AiPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    icon: str
    name: str
    # The idea handed to the generator when a user picks this preset
    prompt: str
    category: str = "general"


class Tool(BaseModel):
    """
    A named page script. Persisted with camelCase keys (``isAutoRun``, ``isTrusted``...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    name: str
    script: str
    is_auto_run: bool = False
    is_visible_on_main: bool = False
    icon: str = DEFAULT_ICON
    description: str = ""
    is_trusted: bool = False

    @classmethod
    def from_draft(cls, draft: GeneratedToolDraft, *, trusted: bool = False) -> Self:
        """Saved AI drafts are untrusted unless created through the trusted path"""
        return cls(
            name=draft.name,
            script=draft.script,
            is_visible_on_main=True,
            description=draft.explanation,
            is_trusted=trusted,
        )

    @classmethod
    def from_preset(cls, preset: AiPreset) -> Self:
        return cls(
            name=preset.name,
            script=PRESET_PLACEHOLDER_SCRIPT,
            is_visible_on_main=True,
            icon=preset.icon,
            is_trusted=True,
        )

    def to_record(self) -> dict[str, str | bool]:
        return self.model_dump(by_alias=True)


BUILTIN_PRESETS: tuple[AiPreset, ...] = (
    AiPreset(
        icon="🚫",
        name="Hide Ads",
        prompt="Create a JavaScript that hides all ads, banners, and sponsored content on the page",
    ),
    AiPreset(
        icon="🛠️",
        name="Dev Tools",
        prompt="Inject Eruda developer tools from CDN and initialize it",
        category="developer",
    ),
    AiPreset(
        icon="🌐",
        name="Translate",
        prompt="Create a script that opens Google Translate for the current page URL",
    ),
    AiPreset(
        icon="🌙",
        name="Dark Mode",
        prompt="Create a script that inverts colors and applies a dark theme to the page",
    ),
    AiPreset(
        icon="📖",
        name="Reader Mode",
        prompt="Create a script that removes clutter and makes the page easier to read",
    ),
    AiPreset(
        icon="❌",
        name="Remove Popups",
        prompt="Create a script that removes all popups, modals, overlays and cookie banners",
    ),
)


def first_run_tool() -> Tool:
    """The tool a store starts with when nothing was ever persisted"""
    return Tool(
        name="Dark Mode",
        script="document.body.style.backgroundColor='#222';document.body.style.color='#fff';",
        is_visible_on_main=True,
        icon="🌙",
        description="Dark background with light text",
        is_trusted=True,
    )
