"""Allow ``python -m automation_agent``."""

from automation_agent.ui.cli import main

main()
