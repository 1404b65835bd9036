"""scrumflow: workflow rules engine for task and card state transitions.

Reacts to committed state changes, matches them against project automation
rules, records each (rule, origin) execution exactly once, and materializes
tasks from templates.
"""

__version__ = "1.0.0"
