"""Dotfile templates and the helpers that write them.

Static files (tmux.conf, CLAUDE.md, settings.json, starship.toml) are only
written when absent. ``~/.bash_aliases`` and ``~/.agent_aliases`` are
regenerated, since they are owned by riftkit.
"""

import logging
from pathlib import Path

from riftkit.installer.base import InstallModule, StepResult
from riftkit.modules.user_context import UserContext

logger = logging.getLogger(__name__)


TMUX_CONF = """\
# Better tmux config for development

# Change prefix from C-b to C-a
unbind C-b
set-option -g prefix C-a
bind-key C-a send-prefix

# Split panes using | and -
bind | split-window -h
bind - split-window -v
unbind '"'
unbind %

# Reload config file
bind r source-file ~/.tmux.conf \\; display-message "Config reloaded!"

# Switch panes using Alt-arrow without prefix
bind -n M-Left select-pane -L
bind -n M-Right select-pane -R
bind -n M-Up select-pane -U
bind -n M-Down select-pane -D

# Enable mouse mode
set -g mouse on

# Don't rename windows automatically
set-option -g allow-rename off

# Start window numbering from 1
set -g base-index 1
setw -g pane-base-index 1

# Status bar
set -g status-bg black
set -g status-fg white
set -g status-left '[#S] '
set -g status-right '%Y-%m-%d %H:%M '
set -g status-left-length 20
set -g status-right-length 20

# Highlight active window
setw -g window-status-current-style 'fg=colour1 bg=colour19 bold'
setw -g window-status-current-format ' #I#[fg=colour249]:#[fg=colour255]#W#[fg=colour249]#F '

# Vi mode
setw -g mode-keys vi
bind-key -T copy-mode-vi 'v' send -X begin-selection
bind-key -T copy-mode-vi 'y' send -X copy-selection-and-cancel

# History
set -g history-limit 10000

# No delay for escape key press
set -sg escape-time 0

# Terminal colors
set -g default-terminal "screen-256color"
"""

CLAUDE_MD = """\
# Global Claude Instructions

This file provides guidance to Claude Code when working across all projects.

## General Guidelines
- Use conventional git commits (feat:, fix:, docs:, refactor:, etc.)
- Push meaningful units of work when appropriate
- Focus on clean, maintainable code
- Prefer existing patterns and conventions in each project

## Development Workflow for VMs
- Work in YOLO mode for rapid development: `yolo`
- Use plan mode for complex changes: `plan`
- Keep persistent sessions in tmux: `tm <session-name>`
- Use modern CLI tools (eza, bat, fzf, rg) when available

## VM-Specific Considerations
- Keep resource usage minimal
- Prefer CLI tools over GUI applications
- Monitor system resources with `riftkit monitor`, `btm` or `htop`

## Project Setup
- Check for existing package.json, requirements.txt, pyproject.toml, etc.
- Follow project-specific CLAUDE.md instructions when present
- Use the project's package manager (npm, pnpm, yarn, poetry, etc.)
- Start development servers with --host for remote access

## Common Commands by Project Type

### Node.js/JavaScript
```bash
npm run dev -- --host    # Development with remote access
npm run build            # Production build
npm run test             # Run tests
```

### Python
```bash
python3 -m venv venv     # Create virtual environment
source venv/bin/activate # Activate environment
pip install -r requirements.txt
```

### Docker Projects
```bash
docker compose up -d     # Start services in background
docker compose logs -f   # Follow logs
docker compose down      # Stop services
```

## Security Notes
- Never commit API keys or secrets
- Use environment variables for sensitive data
- Be cautious with --dangerously-skip-permissions outside throwaway VMs
- Review changes before pushing to main/master branches

## Quick Reference
- New project setup: `new-project <name>`
- Free development ports: `killports` or `killport <port>`
- Quick HTTP server: `serve [port]`
- Git status: `gs`
- Tmux session: `tm <name>`
"""

CLAUDE_SETTINGS_JSON = """\
{
  "defaultPermissionMode": "acceptEdits",
  "dangerouslySkipPermissions": true,
  "autoSave": true,
  "theme": "dark"
}
"""

AGENT_ALIASES = """\
# AI Agent Aliases for Remote VM Development
# Generated by riftkit; rewritten on every setup run.

# Claude Code shortcuts
alias yolo='claude --dangerously-skip-permissions --permission-mode acceptEdits'
alias plan='claude --dangerously-skip-permissions --permission-mode plan'
alias claude-safe='claude --permission-mode prompt'
alias loop='while :; do cat prompt.md | claude -p --dangerously-skip-permissions; sleep 1; done'

# Amp shortcuts (if installed)
if command -v amp >/dev/null 2>&1; then
    alias amp-yolo='amp --auto-approve'
    alias amp-safe='amp'
fi

# Quick project setup with Claude config
new-project() {
    local name="$1"
    if [[ -z "$name" ]]; then
        echo "Usage: new-project <project-name>"
        return 1
    fi

    mkdir -p "$name" && cd "$name" || return 1
    git init
    echo "# $name" > README.md

    cat > CLAUDE.md << EOF
# Project: $name

## Development Commands
\\`\\`\\`bash
npm run dev -- --host
npm run build
npm run test
\\`\\`\\`

## Project Structure
Describe your project structure and important files.

## Notes
Add any project-specific notes for Claude Code.
EOF

    echo "✓ Created new project: $name"
    echo "  - Initialized git repository"
    echo "  - Created README.md and CLAUDE.md"
    echo "  - Use 'yolo' or 'plan' to start coding with Claude"
}

# Prompt template for the loop alias
create-prompt() {
    local prompt_file="prompt.md"
    if [[ -f "$prompt_file" ]]; then
        echo "prompt.md already exists"
        return 1
    fi

    cat > "$prompt_file" << 'EOF'
# Development Task

## Objective
Describe what you want to accomplish...

## Context
Provide relevant context about the codebase, current state, etc...

## Requirements
- List specific requirements
- Include any constraints

## Additional Notes
Any other relevant information...
EOF

    echo "✓ Created prompt.md template"
    echo "  Edit the file and run 'loop' for continuous development"
}

# Agent status check
agent-status() {
    riftkit status
}

export -f new-project create-prompt agent-status
"""

BASH_ALIASES = """\
# Productivity aliases for remote VM development
# Generated by riftkit; rewritten on every setup run.

# Navigation
alias ..='cd ..'
alias ...='cd ../..'
alias ....='cd ../../..'

# Listing (eza when available)
if command -v eza >/dev/null 2>&1; then
    alias ls='eza'
    alias ll='eza -la --git'
    alias lt='eza --tree --level=2'
else
    alias ll='ls -alF'
    alias la='ls -A'
fi

# Better defaults when the modern tools are installed
command -v batcat >/dev/null 2>&1 && alias bat='batcat'
command -v bat >/dev/null 2>&1 && alias cat='bat --paging=never'

# Git
alias gs='git status'
alias ga='git add'
alias gc='git commit'
alias gp='git push'
alias gl='git log --oneline --graph --decorate -20'
alias gd='git diff'
alias gco='git checkout'
alias gb='git branch'

# Node.js
alias ni='npm install'
alias nr='npm run'
alias nd='npm run dev -- --host'
alias nb='npm run build'
alias nt='npm run test'

# Python
alias py='python3'
alias venv='python3 -m venv venv && source venv/bin/activate'
alias activate='source venv/bin/activate'

# System
alias ports='ss -tlnp'
alias mon='riftkit monitor'
alias monc='riftkit monitor --continuous'
alias killports='riftkit killports'
alias myip="hostname -I | awk '{print \\$1}'"

# Tmux: attach to a session or create it
tm() {
    local session="${1:-main}"
    tmux attach -t "$session" 2>/dev/null || tmux new -s "$session"
}

# Quick HTTP server on the given port (default 8000)
serve() {
    local port="${1:-8000}"
    python3 -m http.server "$port" --bind 0.0.0.0
}

# Kill whatever listens on one port
killport() {
    if [[ -z "$1" ]]; then
        echo "Usage: killport <port>"
        return 1
    fi
    riftkit killports -p "$1"
}

# Show all aliases and functions defined here
aliases() {
    echo "=== Aliases ==="
    alias | sed 's/^alias //'
    echo ""
    echo "=== Functions ==="
    echo "  tm <name>       attach or create tmux session"
    echo "  serve [port]    quick HTTP server"
    echo "  killport <port> free a single port"
    echo "  new-project     project with CLAUDE.md"
    echo "  create-prompt   prompt.md for the loop alias"
    echo "  agent-status    AI agent install/auth status"
}
"""

STARSHIP_TOML = """\
# Minimal starship config for development VMs
[character]
success_symbol = "[➜](bold green)"
error_symbol = "[➜](bold red)"

[directory]
truncation_length = 3
truncate_to_repo = true

[git_branch]
symbol = "🌱 "

[nodejs]
symbol = "⬢ "

[python]
symbol = "🐍 "

[docker_context]
symbol = "🐳 "

[time]
disabled = false
format = "[$time]($style)"
"""

QUICK_SETUP_SCRIPT = """\
#!/bin/bash
# Quick setup for a fresh VM: installs riftkit and runs the agent profile.
set -e

echo "🚀 Installing riftkit..."
python3 -m pip install --user riftkit

echo "🚀 Running setup..."
python3 -m riftkit bootstrap --profile "${1:-agent}"

echo "🚀 Setup complete! Log out and back in to refresh environment."
echo "🚀 Then run 'yolo' to start AI coding with Claude!"
"""

BASH_ALIASES_SOURCE = """
# Load custom aliases
if [ -f ~/.bash_aliases ]; then
    source ~/.bash_aliases
fi
"""

AGENT_ALIASES_SOURCE = """
# AI Agent aliases
source ~/.agent_aliases
"""

RC_FILES = (".bashrc", ".zshrc")


def append_once(path: Path, marker: str, block: str) -> bool:
    """Append ``block`` to an existing file unless ``marker`` already occurs in it.

    Missing files are left alone.

    Returns:
        True if the file was changed
    """
    if not path.is_file():
        return False
    content = path.read_text(errors="replace")
    if marker in content:
        return False
    with open(path, "a") as f:
        f.write(block if block.endswith("\n") else block + "\n")
    logger.debug(f"Appended to {path}: {block.strip()}")
    return True


def write_file(user: UserContext, path: Path, content: str, mode: int | None = None) -> Path:
    """Write ``content`` to ``path`` and hand it to the target user."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mode is not None:
        path.chmod(mode)
    user.chown(path)
    logger.debug(f"Wrote {path}")
    return path


def write_if_absent(user: UserContext, path: Path, content: str) -> bool:
    """
    Returns:
        True if the file was written, False if it already existed
    """
    if path.exists():
        return False
    write_file(user, path, content)
    return True


def count_lines(path: Path) -> int:
    """Line count of a file (``wc -l``), 0 if it does not exist."""
    try:
        return path.read_text(errors="replace").count("\n")
    except OSError:
        return 0


class AliasesModule(InstallModule):
    """Write ~/.bash_aliases and make .bashrc source it."""

    name = "aliases"
    title = "Shell Aliases"

    def steps(self):
        return [self._bash_aliases]

    def _bash_aliases(self) -> StepResult:
        target = self.user.home / ".bash_aliases"
        if self.ctx.skip_existing and target.exists():
            return self._skipped("bash_aliases", "~/.bash_aliases already exists")

        self.progress.status("Setting up aliases and shell configuration...")
        write_file(self.user, target, BASH_ALIASES)
        if append_once(self.user.home / ".bashrc", ".bash_aliases", BASH_ALIASES_SOURCE):
            self.progress.success("Added ~/.bash_aliases to .bashrc")
        return self._installed("bash_aliases", "Aliases configured")


__all__ = [
    "AGENT_ALIASES",
    "AGENT_ALIASES_SOURCE",
    "BASH_ALIASES",
    "BASH_ALIASES_SOURCE",
    "CLAUDE_MD",
    "CLAUDE_SETTINGS_JSON",
    "QUICK_SETUP_SCRIPT",
    "RC_FILES",
    "STARSHIP_TOML",
    "TMUX_CONF",
    "AliasesModule",
    "append_once",
    "count_lines",
    "write_file",
    "write_if_absent",
]
