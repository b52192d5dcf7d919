"""
Modular Crypt Format codec

Shape driven encoding and decoding of the `$` delimited text used by
password hash identifiers, such as
`$argon2i$m=262144,p=1,t=2$c29tZXNhbHQ$Pmiaqj0op3zyvHKlGsUxZnYXURgvHuKS4/Z3p9pMJGc`.
"""

__version__ = "0.1.0"


from ._error import *
from ._cursor import *
from ._value import *
from ._bytes import *
from ._shape import *
from ._decode import *
from ._encode import *
from ._parser import *
from ._algorithms import *
from ._hashes import *
