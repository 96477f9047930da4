from cfswift.base import TreeMeta


INTEGER = 'Integer'
DOUBLE = 'Double'
STRING = 'String'
CHAR = 'Char'
BUILTIN_TYPES = (CHAR, DOUBLE, INTEGER, STRING)

# BNFC's predefined identifier category. It is never declared in a grammar.
IDENT = 'Ident'


class GrammarError(Exception):
    def __init__(self, message, text='', line=0):
        super(GrammarError, self).__init__(message)
        self.message = message
        self.text = text
        self.line = line

    def __str__(self):
        if self.line:
            return 'line %d: %s' % (self.line, self.message)
        return self.message


class ParsingFailed(GrammarError):
    pass


class InconsistentGrammar(GrammarError):
    pass


class Constructor(object, metaclass=TreeMeta):
    __schema__ = 'label:string type:string construction:[]string line:int@[no_compare, optional]'


class Token(object, metaclass=TreeMeta):
    __schema__ = 'type:string line:int@[no_compare, optional]'


class Entrypoint(object, metaclass=TreeMeta):
    __schema__ = 'types:[]string line:int@[no_compare, optional]'


Rule = (Constructor, Token, Entrypoint)


def is_list_type(name):
    return len(name) > 2 and name.startswith('[') and name.endswith(']')


def list_of(name):
    return '[%s]' % name


def element_type(name):
    """Strip the list brackets from `[T]`; other names pass through."""
    if is_list_type(name):
        return name[1:-1]
    return name


def list_name(name):
    """`[T]` names the generated `ListT` type, other names are unchanged."""
    if is_list_type(name):
        return 'List' + name[1:-1]
    return name
