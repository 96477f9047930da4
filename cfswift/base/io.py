class Block(object):
    def __init__(self, out):
        assert isinstance(out, BlockWriter), out
        self.out = out

    def __enter__(self):
        self.out.end_block()
        return self.out

    def __exit__(self, type, value, traceback):
        self.out.end_block()


class BlockWriter(object):
    """Accumulates generated source as a sequence of declaration blocks.

    Blocks are joined with a single blank line. Text written between two
    calls to end_block() forms one block; trailing newlines inside a block
    are dropped so the separator is always exactly one empty line.
    """

    def __init__(self):
        self.blocks = []
        self.buffer = []

    def write(self, text):
        self.buffer.append(text)
        return self

    def line(self, text=''):
        self.buffer.append(text)
        self.buffer.append('\n')
        return self

    def end_block(self):
        text = ''.join(self.buffer).rstrip('\n')
        self.buffer = []
        if text:
            self.blocks.append(text)
        return self

    def block(self):
        return Block(self)

    def getvalue(self):
        self.end_block()
        return '\n\n'.join(self.blocks)
