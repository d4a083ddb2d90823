"""
Parser combinators for small grammars embedded in Python code.

See the objects for more explanations.

See the `nyapen.general` module for ready-made parsers you can use as examples.

Defining parsers:
```
from nyapen.prelude import *
from nyapen.primitive import lit, regex

greeting = (
    lit("Hello").map(lambda _, parsed: parsed[0])
    .then(lit(",").opt())
    .then(regex(r"\\w+").map(lambda _, parsed: parsed[0]))
    .eoi()
    .skip(regex(r"\\s+"))
)
```

Using parsers:
```
result = greeting.parse("Hello, World")
if result:
    ... # `result` is an `Output` object
else:
    ... # `result` is a `ParseFailure` object
    raise result.error()
```
"""

import nyapen.const as const
import nyapen.main
from nyapen.main import (
    Parser,
    Output,
    ParseFailure,
    ParseError,
    PatternError,
    skipper,
    NoSkip,
    NO_SKIP,
    Lit,
    Re,
    Map,
    Then,
    Repeated,
    Opt,
    Eoi,
    Skip,
)
from nyapen.primitive import (
    lit,
    regex,
)
import nyapen.prelude as prelude
import nyapen.general as general
