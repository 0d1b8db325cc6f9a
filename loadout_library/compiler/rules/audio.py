"""Audio rules."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ..context import RuleContext
from .base import RuleSet
from .base import fragment
from .base import ok
from .base import set_reg

RULES = RuleSet(Category.AUDIO)

K = OptimizationKey

AUDIO = r"HKCU:\Software\Microsoft\Multimedia\Audio"
SCHEMES = r"HKCU:\AppEvents\Schemes"


def ducking_lines(message: str) -> list[str]:
    # 3 = "Do nothing" when communications activity is detected
    return [set_reg(AUDIO, "UserDuckingPreference", 3), ok(message)]


def silent_scheme_lines() -> list[str]:
    return [set_reg(SCHEMES, "(Default)", ".None")]


def mute_events_lines() -> list[str]:
    return [
        f'Get-ChildItem "{SCHEMES}\\Apps" -Recurse -EA SilentlyContinue | '
        'Where-Object {$_.PSChildName -eq ".Current"} | '
        'ForEach-Object { Set-ItemProperty -Path $_.PSPath -Name "(Default)" -Value "" -EA SilentlyContinue }',
    ]


@RULES.rule(K.AUDIO_ENHANCEMENTS)
def audio_enhancements(ctx: RuleContext) -> Fragment:
    return fragment(K.AUDIO_ENHANCEMENTS, "Audio ducking", ducking_lines("Audio ducking disabled"))


@RULES.rule(K.AUDIO_EXCLUSIVE)
def audio_exclusive(ctx: RuleContext) -> Fragment:
    return fragment(
        K.AUDIO_EXCLUSIVE,
        "Exclusive-mode sound scheme",
        [*silent_scheme_lines(), ok("Sound scheme set to No Sounds for exclusive-mode apps")],
    )


@RULES.rule(K.AUDIO_COMMUNICATIONS)
def audio_communications(ctx: RuleContext) -> Fragment:
    return fragment(
        K.AUDIO_COMMUNICATIONS,
        "Communications volume",
        ducking_lines("Full volume kept during calls"),
    )


@RULES.rule(K.AUDIO_SYSTEM_SOUNDS)
def audio_system_sounds(ctx: RuleContext) -> Fragment:
    return fragment(
        K.AUDIO_SYSTEM_SOUNDS,
        "System sounds",
        [*silent_scheme_lines(), *mute_events_lines(), ok("System sounds muted")],
    )
