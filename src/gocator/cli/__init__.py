"""
Command-line interface for gocator.

This module provides command-line tools for working with profile sensors,
including:

- Fleet-wide start, stop, trigger and read
- The automated self-test
- The protocol emulator
- Fleet configuration management

The CLI is built using the Click framework.

Examples
--------
Self-test against two in-process emulated sensors:
```bash
$ gocator selftest --emulate --settle-time 0.1
```

Serving emulated sensors for another client:
```bash
$ gocator emulator --count 2
```

See Also
--------
gocator.harness : Self-test state machine
gocator.emulator : Protocol emulator


CLI Tree
--------

```
$ gocator --tree
cli
└── emulator
└── fleet
    └── init
    └── install
    └── list
    └── show
└── read
└── selftest
└── start
└── stop
└── trigger
```
"""

from .base import cli, tree_option
from .fleet import fleet

cli.add_command(fleet)

__all__ = ["cli", "tree_option"]
