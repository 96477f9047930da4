from collections import OrderedDict

from cfswift.base import TreeMeta, TypeDispatcher, dispatch
from . import model


Rule = model.Rule

BOX_ALL = 'all'
BOX_CYCLES = 'cycles'
BOX_POLICIES = (BOX_ALL, BOX_CYCLES)


class TypeGroup(object, metaclass=TreeMeta):
    __schema__ = 'name:string rules:[]Rule is_token:bool boxed:bool extra_cases:[]string@[optional]'


class Grammar(object, metaclass=TreeMeta):
    __schema__ = 'rules:[]Rule groups:[]TypeGroup list_types:[]string entrypoints:[]string'


class References(object, metaclass=TypeDispatcher):

    @dispatch(model.Constructor)
    def visitConstructor(cls, node):
        return node.construction

    @dispatch(model.Entrypoint)
    def visitEntrypoint(cls, node):
        return node.types

    @dispatch(model.Token)
    def visitToken(cls, node):
        return ()


def references(rules):
    """Every category name referenced by a construction or entrypoint list."""
    for rule in rules:
        for name in References.visit(rule):
            yield name


def ident_used(rules):
    for name in references(rules):
        if model.element_type(name) == model.IDENT:
            return True
    return False


def list_types(rules):
    """Sorted names of the categories used in `[T]` form anywhere."""
    used = set()
    for name in references(rules):
        if model.is_list_type(name):
            used.add(model.element_type(name))
    return tuple(sorted(used))


def group_by_type(rules):
    groups = OrderedDict()
    for rule in rules:
        if isinstance(rule, model.Entrypoint):
            continue
        groups.setdefault(rule.type, []).append(rule)

    for name, members in groups.items():
        tokens = [r for r in members if isinstance(r, model.Token)]
        if tokens and len(tokens) != len(members):
            raise model.InconsistentGrammar(
                'type %s is declared both as a token and by constructor rules' % name,
                line=tokens[0].line)
        if len(tokens) > 1:
            raise model.InconsistentGrammar(
                'token %s is declared more than once' % name, line=tokens[1].line)
    return groups


def reference_graph(groups):
    graph = {}
    for name, members in groups.items():
        edges = set()
        for rule in members:
            if not isinstance(rule, model.Constructor):
                continue
            for element in rule.construction:
                # Swift arrays are heap allocated, so lists never need boxing.
                if not model.is_list_type(element):
                    edges.add(element)
        graph[name] = edges
    return graph


def reaches(graph, start, target):
    pending = list(graph.get(start, ()))
    visited = set()
    while pending:
        current = pending.pop()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        pending.extend(graph.get(current, ()))
    return False


def find_recursive(groups):
    graph = reference_graph(groups)
    return set(name for name in graph if reaches(graph, name, name))


def entrypoint_types(rules):
    """The parse targets, falling back to the first constructor's type."""
    declared = [r for r in rules if isinstance(r, model.Entrypoint)]
    if len(declared) > 1:
        raise model.ParsingFailed(
            'only one entrypoints declaration is supported',
            'entrypoints ' + ', '.join(declared[1].types), declared[1].line)
    if declared:
        return declared[0].types
    for rule in rules:
        if isinstance(rule, model.Constructor):
            return (rule.type,)
    return ()


def add_extra_cases(groups, extra_cases):
    """Attach manually written enum cases to their type groups."""
    by_name = dict((g.name, g) for g in groups)
    for name in extra_cases:
        group = by_name.get(name)
        if group is None:
            raise model.InconsistentGrammar('extra cases given for unknown type %s' % name)
        if group.is_token:
            raise model.InconsistentGrammar('extra cases given for token type %s' % name)

    result = []
    for group in groups:
        cases = extra_cases.get(group.name)
        if cases:
            group = TypeGroup(group.name, group.rules, group.is_token, group.boxed,
                              tuple(group.extra_cases) + tuple(cases))
        result.append(group)
    return tuple(result)


def analyze(rules, extra_cases=None, box_policy=BOX_ALL):
    if box_policy not in BOX_POLICIES:
        raise ValueError('unknown box policy %r' % (box_policy,))

    rules = tuple(rules)
    groups = group_by_type(rules)
    used = list_types(rules)
    if box_policy == BOX_ALL:
        recursive = set(groups)
    else:
        recursive = find_recursive(groups)

    result = []
    for name in sorted(groups):
        members = groups[name]
        is_token = isinstance(members[0], model.Token)
        result.append(TypeGroup(name, members, is_token, not is_token and name in recursive))
    result = tuple(result)

    if extra_cases:
        result = add_extra_cases(result, extra_cases)

    return Grammar(rules, result, used, entrypoint_types(rules))
