"""riftkit - development VM setup toolkit

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Idempotent installs (check first, then act)
- Fail fast with helpful guidance

riftkit installs AI coding agents and developer tooling on a fresh Ubuntu
VM, frees stuck development ports and reports resource usage.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
