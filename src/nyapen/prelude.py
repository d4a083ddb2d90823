"""
Everything needed to combine and run parsers.

```
from nyapen.prelude import *
from nyapen.primitive import lit, regex
```
"""

from nyapen.main import (
    Parser,
    Output,
    ParseFailure,
    ParseError,
)

__all__ = ["Parser", "Output", "ParseFailure", "ParseError"]
