import re
from enum import IntEnum


class IntEnum2(IntEnum):
    '''IntEnum that prints as its bare member name'''

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()

    @classmethod
    def from_name(cls, name: str):
        '''Look up a member by 'GreaterThanOrEqual', 'greater_than_or_equal' or 'GREATER_THAN_OR_EQUAL'

        Raises KeyError for unknown names.
        '''
        if not name:
            raise KeyError(name)

        if name.isupper() or '_' in name:
            key = name.upper()

        else:
            key = re.sub(r'(?<!^)(?=[A-Z])', '_', name[0].upper() + name[1:]).upper()

        return cls[key]
