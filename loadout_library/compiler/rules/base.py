"""Building blocks shared by the rule modules.

A rule set collects fragment generators for one catalog category. Generators
are registered with the ``RuleSet.rule`` decorator in the order they are
defined, which is the order their fragments appear in the script body.
"""

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ...models.optimizations import get_info
from ..context import RuleContext

FragmentGenerator = Callable[[RuleContext], Fragment]


@dataclass(frozen=True)
class Rule:
    key: OptimizationKey
    generate: FragmentGenerator


class RuleSet:
    """Ordered collection of rules for one category.

    Example:
        >>> RULES = RuleSet(Category.AUDIO)
        >>> @RULES.rule(OptimizationKey.AUDIO_ENHANCEMENTS)
        ... def audio_enhancements(ctx):
        ...     ...
    """

    def __init__(self, category: Category) -> None:
        self.category = category
        self._rules: list[Rule] = []

    def rule(self, key: OptimizationKey) -> Callable[[FragmentGenerator], FragmentGenerator]:
        """Register the decorated function as the generator for ``key``."""

        def decorator(func: FragmentGenerator) -> FragmentGenerator:
            self._rules.append(Rule(key=key, generate=func))
            return func

        return decorator

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


def fragment(key: OptimizationKey, title: str, lines: Iterable[str], warnings: Iterable[str] = ()) -> Fragment:
    """Build a single-key fragment, taking tier and reboot flags from the catalog."""
    info = get_info(key)
    return Fragment(
        source_keys=frozenset({key}),
        title=title,
        text="\n".join(lines),
        requires_reboot=info.requires_reboot,
        warnings=tuple(warnings),
        tier=info.tier,
        requires_ack=info.requires_ack,
    )


def escape_ps(value: str) -> str:
    """Escape a value for use inside a PowerShell double-quoted string."""
    return value.replace("`", "``").replace('"', '`"').replace("$", "`$").replace("\r\n", " ").replace("\n", " ")


def ps_value(value: int | str) -> str:
    """Render a registry value as a PowerShell literal.

    DWORDs above the signed 32-bit range are written in hex, which
    PowerShell parses as the matching negative Int32.
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return hex(value) if value > 0x7FFFFFFF else str(value)
    return f'"{escape_ps(value)}"'


def set_reg(path: str, name: str, value: int | str, kind: str = "DWORD") -> str:
    """Render a call to the script's idempotent Set-Reg helper.

    Paths starting with ``$`` are emitted as PowerShell variables; any other
    path is quoted. String values default to the String registry type.
    """
    target = path if path.startswith("$") else f'"{path}"'
    line = f'Set-Reg {target} "{name}" {ps_value(value)}'
    if isinstance(value, str) and kind == "DWORD":
        kind = "String"
    if kind != "DWORD":
        line += f' "{kind}"'
    return line


def set_reg_checked(path: str, name: str, value: int | str, message: str, kind: str = "DWORD") -> str:
    """Render a Set-Reg call that reports success or failure."""
    call = set_reg(path, name, value, kind)
    return f'if ({call} -PassThru) {{ Write-OK "{escape_ps(message)}" }} else {{ Write-Fail "Could not apply: {escape_ps(message)}" }}'


def ok(message: str) -> str:
    return f'Write-OK "{escape_ps(message)}"'


def powercfg_setting(subgroup: str, setting: str, value: int, message: str) -> list[str]:
    """Render a powercfg AC value change on the active scheme."""
    return [
        f"powercfg /setacvalueindex scheme_current {subgroup} {setting} {value} 2>&1 | Out-Null",
        "if ($LASTEXITCODE -eq 0) {",
        "    powercfg /setactive scheme_current 2>&1 | Out-Null",
        f'    Write-OK "{escape_ps(message)}"',
        f'}} else {{ Write-Warn "{escape_ps(message)}: setting not supported" }}',
    ]


def active_adapters_loop(body: Iterable[str]) -> list[str]:
    """Wrap statements in a loop over the active network adapters."""
    lines = ['Get-NetAdapter | Where-Object {$_.Status -eq "Up"} | ForEach-Object {']
    lines.extend(f"    {line}" for line in body)
    lines.append("}")
    return lines
