import inspect
import re

ident = re.compile(r'\w+')
ws = re.compile(r'\s*')


class NamedType(object):
    def __init__(self, name):
        self.name = name


class ListType(object):
    def __init__(self, t):
        self.t = t


class FieldDecl(object):
    def __init__(self, name, t, attrs):
        self.name = name
        self.t = t
        self.attrs = attrs


class SchemaParser(object):
    def __init__(self):
        pass

    def error(self, msg):
        raise Exception('%s @ %d: %r' % (msg, self.pos, self.schema))

    def check_exact(self, c):
        return self.schema.startswith(c, self.pos)

    def consume_exact(self, c):
        self.pos += len(c)

    def require_exact(self, c):
        if self.check_exact(c):
            self.consume_exact(c)
        else:
            self.error('Missing %r' % c)

    def s(self):
        self.pos = ws.match(self.schema, self.pos).end()

    def ident(self):
        m = ident.match(self.schema, self.pos)
        if m:
            assert m.end() != self.pos
            self.pos = m.end()
            return m.group()
        else:
            return None

    def type_ref(self):
        name = self.ident()
        if name is not None:
            return NamedType(name)
        elif self.check_exact('[]'):
            self.consume_exact('[]')
            t = self.type_ref()
            if t is None:
                self.error('Missing type ref')
            return ListType(t)
        return None

    def attrs(self):
        attrs = []
        if not self.check_exact('@'):
            return attrs
        self.consume_exact('@')
        self.s()
        self.require_exact('[')
        self.s()
        name = self.ident()
        if name is not None:
            attrs.append(name)
            while True:
                self.s()
                if not self.check_exact(','):
                    break
                self.consume_exact(',')
                self.s()
                name = self.ident()
                if name is None:
                    self.error('Missing attr')
                attrs.append(name)
        self.s()
        self.require_exact(']')
        return attrs

    def parse_field(self):
        name = self.ident()
        if not name:
            return None
        self.s()
        self.require_exact(':')
        self.s()
        t = self.type_ref()
        if not t:
            self.error('Missing type')
        self.s()
        attrs = self.attrs()
        return FieldDecl(name, t, attrs)

    def parse(self, schema):
        self.schema = schema
        self.pos = 0

        fields = []
        optional = False
        while True:
            self.s()
            f = self.parse_field()
            if f is None:
                break
            if 'optional' in f.attrs:
                optional = True
            elif optional:
                self.error('Required field %r follows an optional one' % f.name)
            fields.append(f)
        self.s()
        if self.pos != len(self.schema):
            self.error('Unexpected %r' % self.schema[self.pos])
        return fields


python_types = {
    'string': 'str',
    'int': 'int',
    'bool': 'bool',
}


def zero_value(t):
    if isinstance(t, NamedType):
        if t.name == 'string':
            return ''
        elif t.name == 'bool':
            return False
        elif t.name == 'int':
            return 0
        else:
            # Only builtin and list fields can be optional.
            assert False, t.name
    elif isinstance(t, ListType):
        return ()
    else:
        assert False, t


# Lists are frozen into tuples on the way in so records stay immutable.
def gen_validation(fn, ft, indent, coerce=True):
    src = ''
    if isinstance(ft, ListType):
        if coerce:
            src += indent + '%s = tuple(%s)\n' % (fn, fn)
        else:
            src += indent + 'assert isinstance(%s, tuple), (self.__class__, %s.__class__)\n' % (fn, fn)
        child_src = gen_validation('_' + fn, ft.t, indent + '    ', False)
        if child_src:
            src += indent + 'for _%s in %s:\n' % (fn, fn)
            src += child_src
    elif isinstance(ft, NamedType):
        t = python_types.get(ft.name, ft.name)
        src += indent + 'assert isinstance(%s, %s), (self.__class__, %s.__class__)\n' % (fn, t, fn)
    return src


def tuple_expr(prefix, names):
    return '(%s)' % ''.join('%s.%s, ' % (prefix, name) for name in names)


class TreeMeta(type):
    def __new__(cls, name, parents, dct):
        assert '__schema__' in dct, dct

        # Grab the globals used while defining the class.
        cls_globals = inspect.currentframe().f_back.f_globals

        p = SchemaParser()
        fields = p.parse(dct['__schema__'])

        dct['__slots__'] = tuple(f.name for f in fields)
        dct['__fields__'] = tuple(f.name for f in fields)
        compared = [f.name for f in fields if 'no_compare' not in f.attrs]

        src = ''
        if '__init__' not in dct:
            args = ['self']
            for f in fields:
                if 'optional' in f.attrs:
                    args.append('%s=%r' % (f.name, zero_value(f.t)))
                else:
                    args.append(f.name)
            src += '\n'
            src += 'def __init__(%s):\n' % ', '.join(args)
            if fields:
                for f in fields:
                    src += gen_validation(f.name, f.t, '    ')
                for f in fields:
                    src += '    object.__setattr__(self, %r, %s)\n' % (f.name, f.name)
            else:
                src += '    pass\n'

        if '__setattr__' not in dct:
            src += '\n'
            src += 'def __setattr__(self, name, value):\n'
            src += '    raise AttributeError("%s is immutable" % self.__class__.__name__)\n'
            src += '\n'
            src += 'def __delattr__(self, name):\n'
            src += '    raise AttributeError("%s is immutable" % self.__class__.__name__)\n'

        if '__eq__' not in dct:
            src += '\n'
            src += 'def __eq__(self, other):\n'
            src += '    return self.__class__ is other.__class__ and %s == %s\n' % (
                tuple_expr('self', compared), tuple_expr('other', compared))
            src += '\n'
            src += 'def __hash__(self):\n'
            src += '    return hash((self.__class__,) + %s)\n' % tuple_expr('self', compared)

        if '__repr__' not in dct:
            pat = ', '.join(['%r'] * len(compared))
            args = ['self.__class__.__name__'] + ['self.' + n for n in compared]
            src += '\n'
            src += 'def __repr__(self):\n'
            src += '    return "%%s(%s)" %% (%s,)\n' % (pat, ', '.join(args))

        if src:
            # Inject the code into the class.
            exec(src, cls_globals, dct)

        return super(TreeMeta, cls).__new__(cls, name, parents, dct)


@classmethod
def visit(cls, *args):
    f = cls.__dispatchers__.get(type(args[0]))
    if f:
        return f(cls, *args)
    else:
        raise Exception("%r cannot visit %r" % (cls, type(args[0])))


def dispatch(*types):
    def annotate(f):
        f.__dispatch__ = types
        return f
    return annotate


class TypeDispatcher(type):
    def __new__(cls, name, parents, dct):
        d = {}
        for f in dct.values():
            if not hasattr(f, '__dispatch__'):
                continue
            for t in f.__dispatch__:
                d[t] = f
        dct['__dispatchers__'] = d
        dct['visit'] = visit

        return super(TypeDispatcher, cls).__new__(cls, name, parents, dct)
