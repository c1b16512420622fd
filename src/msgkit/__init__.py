"""
msgkit: leveled console logging with runtime-configurable formats, plus the
`msg` and `xprint` command-line tools.
"""
