import os.path

from cfswift.grammar import model
from cfswift.grammar import parser
from cfswift.grammar import semantic
from cfswift.swift import generate_ast
from cfswift.swift import generate_bridge
from cfswift.swift import pretty


AST_FILE = 'AbstractSyntax.swift'
BRIDGE_FILE = '%sToSwiftBridge.swift'


def header(filename, grammar_name):
    return '\n'.join([
        '//',
        '//  %s' % filename,
        '//  Generated by cf2swift from %s' % grammar_name,
        '//',
        '//  This converter assumes files generated by the BNFC C backend and GNU Bison 2.3,',
        '//  compatibility with other versions can not be guaranteed',
        '//',
        '',
        '',
    ])


def frontend(path, status, extra_cases=None, box_policy=semantic.BOX_ALL):
    """Read and analyse the grammar at path, halting on any error."""
    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        status.error('cannot read grammar: %s' % e, path)
        status.halt_if_errors()
    status.add_source(path, text)

    try:
        rules = parser.parse_grammar(text)
        grammar = semantic.analyze(rules, extra_cases, box_policy)
    except model.GrammarError as e:
        status.error(e.message, path, e.line, e.text or None)
        status.halt_if_errors()
    status.log('parsed %d rules into %d types' % (len(grammar.rules), len(grammar.groups)))
    return grammar


def generate_sources(grammar, module_name, grammar_name):
    """The (filename, text) pairs for the two generated Swift files."""
    bridge_file = BRIDGE_FILE % module_name
    sources = [
        (AST_FILE, generate_ast.generate_ast(grammar)),
        (bridge_file, generate_bridge.generate_bridge(grammar, module_name)),
    ]
    return [(name, header(name, grammar_name) + pretty.make_pretty(text)) for name, text in sources]


def file_is_same(path, text):
    if not os.path.isfile(path):
        return False
    with open(path, encoding='utf-8') as f:
        try:
            return f.read() == text
        except UnicodeDecodeError:
            # Not something this tool wrote.
            return False


def write_outputs(out_dir, sources, status):
    # Every file is attempted even after a failure.
    for name, text in sources:
        path = os.path.join(out_dir, name)
        try:
            if file_is_same(path, text):
                status.log('file %s is unchanged' % name)
                continue
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            status.error('writing file at path %s failed: %s' % (path, e))
        else:
            status.note('generated file %s' % name)
    status.halt_if_errors()


def compile_grammar(path, out_dir, module_name, status, extra_cases=None, box_policy=semantic.BOX_ALL):
    status.log('parsing...')
    grammar = frontend(path, status, extra_cases, box_policy)
    status.log('parsing successful')
    sources = generate_sources(grammar, module_name, os.path.basename(path))
    write_outputs(out_dir, sources, status)
    return sources
