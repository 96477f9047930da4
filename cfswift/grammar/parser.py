"""Reads BNFC grammar descriptions into rule records.

Each non-blank line holds exactly one declaration and must end with `;`.
Only the parts of a grammar that shape the abstract syntax are kept:
labelled rules, `rules` shorthands, `token` and `entrypoints` declarations.
Lexer and list pragmas are recognised and dropped.
"""

import re

from . import model
from . import semantic


IGNORED_KEYWORDS = frozenset([
    'comment',
    'terminator',
    'separator',
    'coercions',
    'layout',
    'delimiters',
])

# Coercion and list labels do not produce a case in the C union.
DISCARDED_LABELS = frozenset(['_', '[]', '(:)', '(:[])'])

trailing_digits = re.compile(r'\d+$')
identifier_part = re.compile(r'[A-Za-z0-9_]+$')
literal = re.compile(r'"(?:[^"\\]|\\.)*"')


class RuleParser(object):
    def __init__(self, text, lineno=0):
        self.text = text
        self.lineno = lineno

    def error(self, msg):
        raise model.ParsingFailed(msg, self.text, self.lineno)

    def clean_label(self, label):
        label = label.strip()
        words = label.split(None, 1)
        if len(words) == 2 and words[0] == 'internal':
            label = words[1].strip()
        return label

    def clean_type(self, name):
        name = name.strip()
        if model.is_list_type(name):
            return model.list_of(self.clean_type(model.element_type(name)))
        cleaned = trailing_digits.sub('', name)
        if not cleaned:
            self.error('invalid type name %r' % name)
        return cleaned

    def clean_construction(self, construction):
        remainder = literal.sub(' ', construction)
        if '"' in remainder:
            self.error('unterminated string literal')
        return tuple(self.clean_type(element) for element in remainder.split())

    def parse(self):
        line = self.text.strip()
        if not line.endswith(';'):
            self.error('rules must be terminated with `;`')
        rule = line[:-1].strip()
        if not rule:
            self.error('empty rule')

        keyword = rule.split(None, 1)[0]
        if keyword in IGNORED_KEYWORDS:
            return ()
        elif keyword == 'token':
            return (self.parse_token(rule),)
        elif keyword == 'entrypoints':
            return (self.parse_entrypoints(rule),)
        elif keyword == 'rules':
            return self.parse_rules(rule)
        else:
            return self.parse_constructor(rule)

    def parse_token(self, rule):
        words = rule.split()
        if len(words) < 2:
            self.error('missing token name')
        return model.Token(self.clean_type(words[1]), self.lineno)

    def parse_entrypoints(self, rule):
        remainder = rule[len('entrypoints'):]
        types = [self.clean_type(t) for t in remainder.split(',') if t.strip()]
        if not types:
            self.error('entrypoints must name at least one type')
        return model.Entrypoint(types, self.lineno)

    def parse_rules(self, rule):
        decl = rule.find('::=')
        if decl < 0:
            self.error('invalid rule: missing `::=`')
        name = self.clean_type(rule[len('rules'):decl])
        alternatives = [a.strip() for a in rule[decl + 3:].split('|')]
        alternatives = [a for a in alternatives if a]
        if not alternatives:
            self.error('rules for %s has no alternatives' % name)

        rules = []
        for index, alternative in enumerate(alternatives, 1):
            if len(alternative.split()) != 1:
                self.error('the `rules` keyword is only supported with a single symbol per alternative')
            symbol = alternative.replace('"', '')
            # Symbols that cannot appear in an identifier are numbered instead.
            if identifier_part.match(symbol):
                label = '%s_%s' % (name, symbol)
            else:
                label = '%s%d' % (name, index)
            construction = self.clean_construction(alternative)
            rules.append(model.Constructor(label, name, construction, self.lineno))
        return tuple(rules)

    def parse_constructor(self, rule):
        dot = rule.find('.')
        decl = rule.find('::=')
        if dot < 0 or decl < 0 or dot > decl:
            self.error('invalid rule: expected `label . type ::= construction`')

        label = self.clean_label(rule[:dot])
        if not label:
            self.error('missing label')
        if label in DISCARDED_LABELS:
            return ()

        type_text = rule[dot + 1:decl].strip()
        if not type_text:
            self.error('missing type')
        if model.is_list_type(type_text):
            self.error('list categories only take the labels %s' % ', '.join(sorted(DISCARDED_LABELS)))
        name = self.clean_type(type_text)
        construction = self.clean_construction(rule[decl + 3:])
        return (model.Constructor(label, name, construction, self.lineno),)


def parse_line(line, lineno=0):
    return RuleParser(line, lineno).parse()


def inject_ident(rules):
    """Append the synthetic `Ident` token when the category is referenced."""
    rules = tuple(rules)
    for rule in rules:
        if isinstance(rule, model.Token) and rule.type == model.IDENT:
            return rules
    if semantic.ident_used(rules):
        return rules + (model.Token(model.IDENT),)
    return rules


def parse_grammar(text):
    rules = []
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        rules.extend(parse_line(line, lineno))

    # Rejects duplicate entrypoint declarations.
    semantic.entrypoint_types(rules)
    return inject_ident(rules)
