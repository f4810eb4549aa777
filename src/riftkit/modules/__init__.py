"""riftkit modules - Self-contained bricks shared by the commands

Each module is a self-contained component with clear contracts:
- Subprocess Helper: Run external tools without pipe deadlocks
- Prerequisites Checker: Verify required tools and privileges
- Progress Display: Show real-time progress
- Interaction Handler: Yes/no prompts for CLI, unattended runs and tests
- User Context: Act on behalf of the user who invoked sudo
"""
