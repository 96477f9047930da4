from cfswift.base.io import BlockWriter
from cfswift.grammar import model


SWIFT_TYPES = {}
SWIFT_TYPES[model.INTEGER] = 'Int'
SWIFT_TYPES[model.DOUBLE] = 'Double'
SWIFT_TYPES[model.STRING] = 'String'
SWIFT_TYPES[model.CHAR] = 'Character'

# Names that must be wrapped in backticks to be used as an enum case.
SWIFT_KEYWORDS = frozenset([
    'associatedtype', 'class', 'deinit', 'enum', 'extension', 'fileprivate',
    'func', 'import', 'init', 'inout', 'internal', 'let', 'open', 'operator',
    'private', 'protocol', 'public', 'rethrows', 'static', 'struct',
    'subscript', 'typealias', 'var',
    'break', 'case', 'continue', 'default', 'defer', 'do', 'else',
    'fallthrough', 'for', 'guard', 'if', 'in', 'repeat', 'return', 'switch',
    'where', 'while',
    'as', 'catch', 'false', 'is', 'nil', 'self', 'super', 'throw', 'throws',
    'true', 'try',
])

PRINTING_PROTOCOL = 'CustomAbstractSyntaxPrinting'


def lower_first(text):
    return text[:1].lower() + text[1:]


def enum_case(label, type_name):
    """The Swift case name used for a rule label of the given type.

    A label that starts with its own type name (ignoring case) loses that
    prefix, so `ExpAdd` of `Exp` becomes `add`, unless no letter would
    follow it: `Op1` of `Op` stays `op1`. A single leading underscore
    is dropped and the first character lowercased. Keywords come back
    escaped with backticks.
    """
    case = label
    if len(label) > len(type_name) and label.lower().startswith(type_name.lower()):
        rest = label[len(type_name):]
        if rest.lstrip('_')[:1].isalpha():
            case = rest
    if case.startswith('_') and case != '_':
        case = case[1:]
    case = lower_first(case)
    if case in SWIFT_KEYWORDS:
        return '`%s`' % case
    return case


def swift_type(name):
    if model.is_list_type(name):
        return model.list_name(name)
    return SWIFT_TYPES.get(name, name)


def gen_enum(group, out):
    cases = []
    for rule in group.rules:
        case = 'case ' + enum_case(rule.label, group.name)
        if rule.construction:
            case += '(' + ', '.join(swift_type(element) for element in rule.construction) + ')'
        cases.append(case)

    if group.extra_cases:
        cases.append('//additional cases')
        for extra in group.extra_cases:
            extra = extra.strip()
            if not extra.startswith('case '):
                extra = 'case ' + extra
            if extra not in cases:
                cases.append(extra)

    indirect = 'indirect ' if group.boxed else ''
    out.line('public %senum %s {' % (indirect, group.name))
    for case in cases:
        out.line(case)
    out.line('}')
    out.end_block()


def gen_list_alias(name, out):
    out.line('public typealias %s = [%s]' % (model.list_name(model.list_of(name)), swift_type(name)))


def gen_token(group, out):
    out.line('public struct %s {' % group.name)
    out.line('public let value: String')
    out.line()
    out.line('public init(_ value: String) {')
    out.line('self.value = value')
    out.line('}')
    out.line('}')
    out.end_block()


def gen_printing_support(out):
    out.line('//MARK:- Custom printing').end_block()

    out.line('public protocol %s {' % PRINTING_PROTOCOL)
    out.line('func show() -> String')
    out.line('}')
    out.end_block()

    # Reflection prefixes every value with the module name; strip it.
    out.line('extension %s {' % PRINTING_PROTOCOL)
    out.line('public func show() -> String {')
    out.line('let description = String(reflecting: self)')
    out.line('let moduleName = description.components(separatedBy: ".").first!')
    out.line('return description.replacingOccurrences(of: "\\(moduleName).", with: "")')
    out.line('}')
    out.line('}')
    out.end_block()


def gen_conformance(group, out):
    out.line('extension %s: %s {' % (group.name, PRINTING_PROTOCOL))
    if group.is_token:
        out.line('public func show() -> String {')
        out.line('return description')
        out.line('}')
    out.line('}')
    out.end_block()


def gen_token_helpers(group, out):
    name = group.name
    out.line('extension %s: CustomStringConvertible {' % name)
    out.line('public var description: String { return "\\(type(of: self))(\\(String(reflecting: value)))" }')
    out.line('}')
    out.end_block()

    out.line('extension %s: Equatable {' % name)
    out.line('public static func ==(lhs: %s, rhs: %s) -> Bool {' % (name, name))
    out.line('return lhs.value == rhs.value')
    out.line('}')
    out.line('}')
    out.end_block()

    out.line('extension %s: Hashable {' % name)
    out.line('public func hash(into hasher: inout Hasher) {')
    out.line('hasher.combine(value)')
    out.line('}')
    out.line('}')
    out.end_block()


def generate_ast(grammar):
    """Swift source declaring the abstract syntax of an analysed grammar."""
    out = BlockWriter()
    enums = [g for g in grammar.groups if not g.is_token]
    tokens = [g for g in grammar.groups if g.is_token]

    if grammar.groups:
        # show() uses Foundation string methods.
        out.line('import Foundation').end_block()

    for group in enums:
        gen_enum(group, out)

    if grammar.list_types:
        out.line('//MARK:- Lists').end_block()
        for name in grammar.list_types:
            gen_list_alias(name, out)
        out.end_block()

    if tokens:
        out.line('//MARK:- Tokens').end_block()
        for group in tokens:
            gen_token(group, out)

    if grammar.groups:
        gen_printing_support(out)
        for group in grammar.groups:
            gen_conformance(group, out)

    if tokens:
        out.line('//MARK:- Token helpers').end_block()
        for group in tokens:
            gen_token_helpers(group, out)

    return out.getvalue()
