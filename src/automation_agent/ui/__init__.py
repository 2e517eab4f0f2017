"""UI module for the automation agent.

This module provides user interface components including:
- The ProgressReporter contract consumed by the orchestrator
- A rich console reporter
- Slash commands and the Typer-based CLI

The CLI can be run directly:
    python -m automation_agent.ui.cli "Your message here"

Note: We don't export CLI components from __init__.py to avoid
import cycles with the orchestrator.
"""

__all__ = []  # CLI is run directly, no exports needed
