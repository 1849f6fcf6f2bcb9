"""ASCII banner logged at the start of every larana process."""

ascii_logo = r"""
 _
| | __ _ _ __ __ _ _ __   __ _
| |/ _` | '__/ _` | '_ \ / _` |
| | (_| | | | (_| | | | | (_| |
|_|\__,_|_|  \__,_|_| |_|\__,_|
"""
