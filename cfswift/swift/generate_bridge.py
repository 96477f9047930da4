"""Swift source that converts the BNFC C parser's output into abstract syntax.

The C backend represents every category with constructor rules as a pointer
to a struct holding a `kind` discriminant and a union `u` with one member per
label. Discriminant values are not visible from Swift, so cases are matched
by their raw value: the position of the rule among the rules for its type,
counting from 0. The order produced by the parser must therefore match the
declaration order in the grammar exactly.
"""

from cfswift.base.io import BlockWriter
from cfswift.grammar import model
from . import generate_ast


# Member names that collide with Swift's metatype syntax after a `.`.
ESCAPED_MEMBERS = frozenset(['Type', 'Protocol'])


def c_accessor(construction, index):
    """The union member holding construction[index].

    An element type that occurs once is read from `<type>_`. Repeated
    element types are numbered left to right from 1: `<type>_1`, `<type>_2`.
    """
    element = construction[index]
    name = model.list_name(element).lower()
    if construction.count(element) == 1:
        return name + '_'
    return '%s_%d' % (name, construction[:index].count(element) + 1)


class Generator(object):
    def __init__(self, module_name, out):
        if not module_name:
            raise ValueError('module name must not be empty')
        self.module_name = module_name
        self.out = out

    def native(self, name):
        if name in ESCAPED_MEMBERS:
            name = '`%s`' % name
        return '%s.%s' % (self.module_name, name)


def gen_case_value(rule, type_name):
    case = generate_ast.enum_case(rule.label, type_name)
    prefix = 'value.u.%s_.' % rule.label.lower()
    args = []
    for i, element in enumerate(rule.construction):
        accessor = c_accessor(rule.construction, i)
        args.append('visit%s(%s%s)' % (model.list_name(element), prefix, accessor))
    if not args:
        return '.%s' % case
    return '.%s(%s)' % (case, ', '.join(args))


def gen_visit(group, gen):
    name = group.name
    with gen.out.block() as out:
        out.line('private func visit%s(_ pValue: %s) -> %s {' % (name, gen.native(name), name))
        out.line('let value = pValue.pointee')
        out.line('switch value.kind {')
        for kind, rule in enumerate(group.rules):
            out.line('case %d:' % kind)
            out.line('return ' + gen_case_value(rule, name))
        out.line('default:')
        out.line('print("Error: bad `kind` field when bridging `%s` to Swift!")' % name)
        out.line('exit(1)')
        out.line('}')
        out.line('}')


def gen_list_visit(name, gen):
    list_type = model.list_name(model.list_of(name))
    head = name.lower() + '_'
    tail = list_type.lower() + '_'
    with gen.out.block() as out:
        out.line('private func visit%s(_ pValue: %s?) -> [%s] {' % (
            list_type, gen.native(list_type), generate_ast.swift_type(name)))
        out.line('guard let value = pValue?.pointee else {')
        out.line('return []')
        out.line('}')
        out.line('if value.%s == nil {' % head)
        out.line('return []')
        out.line('}')
        out.line('return [visit%s(value.%s)] + visit%s(value.%s)' % (name, head, list_type, tail))
        out.line('}')


def gen_token_visit(group, gen):
    name = group.name
    with gen.out.block() as out:
        out.line('private func visit%s(_ pValue: %s) -> %s {' % (name, gen.native(name), name))
        out.line('return %s(String(cString: pValue))' % name)
        out.line('}')


# BNFC's predefined categories: C type name, Swift type, conversion.
DEFAULT_TYPES = [
    ('Char', 'Swift.Character', 'Swift.Character(Swift.UnicodeScalar(Swift.UInt8(bitPattern: pChar)))'),
    ('Double', 'Swift.Double', 'pDouble'),
    ('Integer', 'Swift.Int', 'Swift.Int(pInteger)'),
    ('String', 'Swift.String', 'Swift.String(cString: pString)'),
]


def gen_default_visits(gen):
    gen.out.line('//MARK:- Default types').end_block()
    for name, swift_name, conversion in DEFAULT_TYPES:
        with gen.out.block() as out:
            out.line('private func visit%s(_ p%s: %s.%s) -> %s {' % (
                name, name, gen.module_name, name, swift_name))
            out.line('return ' + conversion)
            out.line('}')


def gen_parse_file(name, gen):
    native = model.list_name(name)
    with gen.out.block() as out:
        out.line('public func parseFile(at path: Swift.String) -> %s? {' % generate_ast.swift_type(name))
        out.line('if let file = fopen(path, "r") {')
        out.line('defer { fclose(file) }')
        out.line('if let cTree = %s.p%s(file) {' % (gen.module_name, native))
        out.line('return visit%s(cTree)' % native)
        out.line('}')
        out.line('}')
        out.line('return nil')
        out.line('}')


def generate_bridge(grammar, module_name):
    """Swift source bridging `module_name`'s C parser to the abstract syntax."""
    gen = Generator(module_name, BlockWriter())
    out = gen.out

    with out.block():
        out.line('import Foundation')
        out.line('import %s' % module_name)

    for name in grammar.entrypoints:
        gen_parse_file(name, gen)

    out.line('//MARK:- C to Swift mapping').end_block()
    for group in grammar.groups:
        if not group.is_token:
            gen_visit(group, gen)

    if grammar.list_types:
        out.line('//MARK:- Lists').end_block()
        for name in grammar.list_types:
            gen_list_visit(name, gen)

    tokens = [g for g in grammar.groups if g.is_token]
    if tokens:
        out.line('//MARK:- Tokens').end_block()
        for group in tokens:
            gen_token_visit(group, gen)

    gen_default_visits(gen)
    return out.getvalue()
