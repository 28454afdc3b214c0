'''Error types shared by the IL provider and the C generator'''

DIAGNOSTIC_PREFIX = 'Error: '


class UnsupportedConstructError(Exception):
    '''A node, operator, kind or type outside the supported subset

    The message is the inline diagnostic substituted into the generated code
    when the generator runs in best-effort mode.
    '''

    def __init__(self, what: str):
        super().__init__(f'{DIAGNOSTIC_PREFIX}{what}')

    @property
    def diagnostic(self) -> str:
        return self.args[0]


class ILFormatError(ValueError):
    '''Malformed IL module document'''
    pass
