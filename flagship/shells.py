"""
Shell protocol layer: candidate formatting and completion scripts.

Candidate lines (one per line on stdout)
- bash: "value"                       (descriptions dropped)
- zsh:  "value:description"           (":" inside values escaped as "\\:")
- fish: "value<TAB>description"
ActiveHelp lines follow the candidates with a per-shell sentinel prefix:
- bash: "_activehelp_ <message>"
- zsh:  "_activehelp_::<message>"
- fish: "_activehelp_<TAB><message>"

Environment
- <APP>_COMPLETE selects the dialect (bash when unset or unknown).
- <APP>_ACTIVE_HELP=0|false suppresses ActiveHelp lines.
<APP> is the root command name upper-cased with non-alphanumerics as "_".

Scripts
- generate_completion(name, shell) returns a static script that registers a
  handler for `name`, rebuilds the words typed so far, calls
  "<name> __complete <words...> <current>" with <APP>_COMPLETE set, and feeds the
  lines to the shell's completion primitive.
"""
import logging
import os
import re
from enum import StrEnum

from .faults import InputOutputError
from .utils import envname

logger = logging.getLogger(__name__)


class Shell(StrEnum):
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"


SENTINELS = {
    Shell.BASH: "_activehelp_ ",
    Shell.ZSH: "_activehelp_::",
    Shell.FISH: "_activehelp_\t",
}


def _oneline(text, /):
    return " ".join(str(text).split())


def dialect(name, /, environ=None):
    """Return the Shell selected by <APP>_COMPLETE for application `name`."""
    environ = os.environ if environ is None else environ
    value = environ.get(f"{envname(name)}_COMPLETE", "").strip().lower()
    try:
        return Shell(value)
    except ValueError:
        if value:
            logger.debug("unknown completion dialect %r, using bash", value)
        return Shell.BASH


def active_help_enabled(name, /, environ=None):
    """Return False when <APP>_ACTIVE_HELP is "0" or "false"."""
    environ = os.environ if environ is None else environ
    return environ.get(f"{envname(name)}_ACTIVE_HELP", "").strip().lower() not in ("0", "false")


def render(result, shell, /, *, active_help=True):
    """
    Serialize a CompletionResult into the lines `shell` expects.

    Returns a list of strings without trailing newlines.
    """
    shell = Shell(shell)
    lines = []
    for item in result:
        value = _oneline(item.value) if "\n" in item.value else item.value
        match shell:
            case Shell.BASH:
                lines.append(value)
            case Shell.ZSH:
                value = value.replace(":", "\\:")
                lines.append(f"{value}:{_oneline(item.description)}" if item.description else value)
            case Shell.FISH:
                lines.append(f"{value}\t{_oneline(item.description)}" if item.description else value)
    if active_help:
        for entry in result.active_help:
            lines.append(SENTINELS[shell] + _oneline(entry.message))
    return lines


_BASH = """\
# bash completion for %(prog)s
_%(func)s_complete() {
    local cur words cword
    if declare -F _get_comp_words_by_ref >/dev/null 2>&1; then
        _get_comp_words_by_ref -n =: cur words cword
    else
        cur="${COMP_WORDS[COMP_CWORD]}"
        words=("${COMP_WORDS[@]}")
        cword=$COMP_CWORD
    fi

    # COMP_WORDBREAKS splits --flag=value into "--flag" "=" "value"; glue it back.
    local -a line=()
    local word glue=0
    for word in "${words[@]:0:$((cword+1))}"; do
        if (( glue )); then
            line[${#line[@]}-1]+="$word"
            glue=0
        elif [[ "$word" == "=" ]] && (( ${#line[@]} > 1 )) &&
            [[ "${line[${#line[@]}-1]}" == -* && "${line[${#line[@]}-1]}" != *=* ]]; then
            line[${#line[@]}-1]+="="
            glue=1
        else
            line+=("$word")
        fi
    done
    cur="${line[${#line[@]}-1]}"

    local IFS=$'\\n'
    local response
    response=$(%(env)s_COMPLETE=bash "${line[0]}" __complete "${line[@]:1:$((${#line[@]}-2))}" "$cur" 2>/dev/null)

    local -a candidates=() messages=()
    while IFS= read -r word; do
        [[ -z "$word" ]] && continue
        if [[ "$word" == _activehelp_* ]]; then
            messages+=("${word#_activehelp_ }")
        else
            candidates+=("$word")
        fi
    done <<< "$response"

    # readline only replaces the text after the last word break.
    if [[ "$cur" == -*=* && "$COMP_WORDBREAKS" == *=* ]]; then
        local head="${cur%%%%=*}="
        candidates=("${candidates[@]#"$head"}")
    fi

    COMPREPLY=("${candidates[@]}")
    if (( ${#messages[@]} )); then
        printf '\\n'
        printf '%%s\\n' "${messages[@]}"
    fi
}

complete -o default -F _%(func)s_complete %(prog)s
"""

_ZSH = """\
#compdef %(prog)s
# zsh completion for %(prog)s

_%(func)s() {
    local -a completions messages
    local line response
    response=$(%(env)s_COMPLETE=zsh "${words[1]}" __complete "${(@)words[2,$CURRENT]}" 2>/dev/null)

    for line in "${(@f)response}"; do
        [[ -z "$line" ]] && continue
        if [[ "$line" == _activehelp_::* ]]; then
            messages+=("${line#_activehelp_::}")
        else
            completions+=("$line")
        fi
    done

    if (( ${#messages} )); then
        _message -r "${(F)messages}"
    fi
    if (( ${#completions} )); then
        _describe -t values '%(prog)s' completions
    fi
}

compdef _%(func)s %(prog)s
"""

_FISH = """\
# fish completion for %(prog)s
function __%(func)s_complete
    set -l tokens (commandline -opc)
    set -l program $tokens[1]
    set -e tokens[1]
    env %(env)s_COMPLETE=fish $program __complete $tokens (commandline -ct) 2>/dev/null | string match -v -- '_activehelp_*'
end

complete -c %(prog)s -f -a '(__%(func)s_complete)'
"""


def generate_completion(name, shell, /):
    """
    Return the completion script registering application `name` with `shell`.

    Raises
    - ValueError: when `shell` is not one of bash, zsh, fish or `name` is unusable.
    """
    try:
        shell = Shell(shell)
    except ValueError:
        raise ValueError(f"unsupported shell {shell!r}; expected one of: {", ".join(Shell)}") from None
    if not isinstance(name, str) or not re.fullmatch(r"[\w.+-]+", name):
        raise ValueError(f"cannot generate completions for program name {name!r}")
    template = {Shell.BASH: _BASH, Shell.ZSH: _ZSH, Shell.FISH: _FISH}[shell]
    return template % {
        "prog": name,
        "func": re.sub(r"\W", "_", name),
        "env": envname(name),
    }


def write_completion(name, shell, stream, /):
    """
    Write the completion script for `name` to `stream`.

    Raises
    - InputOutputError: when the stream cannot be written.
    """
    script = generate_completion(name, shell)
    try:
        stream.write(script)
        stream.flush()
    except OSError as exception:
        raise InputOutputError(
            f"cannot write the {shell} completion script: {exception.strerror or exception}",
            hint="check that the destination is writable",
        ) from exception


__all__ = (
    "Shell",
    "dialect",
    "active_help_enabled",
    "render",
    "generate_completion",
    "write_completion",
)

