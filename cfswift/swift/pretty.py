import io


def is_case_label(line):
    return (line.startswith('case') and line.endswith(':')) or line.startswith('default:')


class BraceIndenter(object):
    """Re-indents brace delimited source line by line.

    Depth is tracked purely syntactically by counting `{` and `}`, including
    those inside string literals and comments. A line starting with `}` is
    emitted at the depth of the block it closes, `case ...:` and `default:`
    labels one level shallower than their body.
    """

    def __init__(self, out, indent_width=4):
        self.out = out
        self.indent_width = indent_width
        self.depth = 0

    def write_line(self, line):
        line = line.strip()
        if not line:
            self.out.write('\n')
            return

        change = line.count('{') - line.count('}')
        if line.startswith('}'):
            self.depth -= 1
            change += 1

        offset = -1 if is_case_label(line) else 0
        self.out.write(' ' * ((self.depth + offset) * self.indent_width))
        self.out.write(line)
        self.out.write('\n')
        self.depth += change


def make_pretty(code, indent_width=4):
    out = io.StringIO()
    indenter = BraceIndenter(out, indent_width)
    for line in code.split('\n'):
        indenter.write_line(line)
    text = out.getvalue()
    # Every line above got a newline; keep only the one the input implies.
    if code.endswith('\n'):
        text = text[:-1]
    return text
