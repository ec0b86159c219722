"""
Segmented bash/zsh prompts with command timing

``promptline`` composes a shell prompt out of small, individually toggleable
segments and keeps track of each interactive command so that the next prompt
can show how long it took and how it exited.

Features:

- Shows the current Git branch (or tag or commit when detached)
- Shows the container ID when running inside Docker or Podman
- Shows the active virtualenv or Conda environment
- Shows the load average, the directory stack depth, and a clock
- Shows the previous command's duration and nonzero exit status in the right
  prompt
- Never lets a slow or missing external tool hold up the prompt
- Supports both Bash and zsh, either one prompt per invocation or as a
  long-running coprocess
"""

__version__ = "0.1.0"
__license__ = "MIT"
