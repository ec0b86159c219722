"""Hook snippets for wiring ``promptline`` into an interactive shell"""

ZSH_INIT = r"""
zmodload zsh/datetime
autoload -Uz add-zsh-hook

_promptline_preexec() {
    _promptline_start=$EPOCHREALTIME
}

_promptline_precmd() {
    local ret=$?
    local -a args out
    args=(--zsh --both --dirstack $#dirstack)
    if [[ -n $_promptline_start ]]; then
        args+=(--since $_promptline_start --status $ret)
    fi
    unset _promptline_start
    out=("${(@f)$(command promptline $args)}")
    PROMPT=$out[1]
    RPROMPT=$out[2]
}

add-zsh-hook preexec _promptline_preexec
add-zsh-hook precmd _promptline_precmd
"""

BASH_INIT = r"""
_promptline_save() {
    _promptline_status=$?
    _promptline_drawing=1
    return $_promptline_status
}

_promptline_debug() {
    # The DEBUG trap also fires for every command in PROMPT_COMMAND
    [[ -n $COMP_LINE || -n $_promptline_drawing ]] && return
    [[ $BASH_COMMAND == _promptline_save* ]] && return
    [[ -z $_promptline_start ]] && _promptline_start=$EPOCHREALTIME
}

_promptline_prompt() {
    local -a args out
    args=(--bash --both --dirstack $(( ${#DIRSTACK[@]} - 1 )))
    if [[ -n $_promptline_start ]]; then
        args+=(--since "$_promptline_start" --status "$_promptline_status")
    fi
    unset _promptline_start
    mapfile -t out < <(command promptline "${args[@]}")
    # Bash has no right prompt; show it on a line of its own above PS1
    PS1="${out[1]:+${out[1]}\n}${out[0]}"
    unset _promptline_drawing
}

trap '_promptline_debug' DEBUG
PROMPT_COMMAND="_promptline_save${PROMPT_COMMAND:+; $PROMPT_COMMAND}; _promptline_prompt"
"""

INIT_SNIPPETS = {
    "bash": BASH_INIT,
    "zsh": ZSH_INIT,
}
