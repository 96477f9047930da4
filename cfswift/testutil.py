import unittest

from cfswift.grammar import model
from cfswift.grammar import parser
from cfswift.grammar import semantic


class GrammarTestCase(unittest.TestCase):
    def p_ok(self, text, rules=None):
        try:
            result = parser.parse_grammar(text)
        except model.GrammarError as e:
            self.fail(str(e))
        if rules is not None:
            self.assertEqual(tuple(rules), result)
        return result

    def p_fail(self, text, error=model.ParsingFailed):
        with self.assertRaises(error) as ctx:
            parser.parse_grammar(text)
        return ctx.exception

    def analyze(self, text, extra_cases=None, box_policy=semantic.BOX_ALL):
        return semantic.analyze(self.p_ok(text), extra_cases, box_policy)

    def group(self, grammar, name):
        found = [g for g in grammar.groups if g.name == name]
        self.assertEqual(len(found), 1, name)
        return found[0]
