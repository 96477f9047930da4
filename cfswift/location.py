import sys

from cfswift.base import TreeMeta


TAB_SIZE = 4


class HaltCompilation(Exception):
    pass


class LocationInfo(object, metaclass=TreeMeta):
    __schema__ = 'filename:string line:int text:string'


def extract_location_info(filename, stream, line):
    lines = stream.splitlines()
    if 1 <= line <= len(lines):
        text = lines[line - 1].replace('\t', ' ' * TAB_SIZE)
    else:
        text = ''
    return LocationInfo(filename, line, text)


class CompileStatus(object):
    def __init__(self, debug=False, out=None):
        self.debug = debug
        self.out = out if out is not None else sys.stdout
        self.sources = {}
        self.errors = 0

    def add_source(self, filename, text):
        self.sources[filename] = text

    def extract_location_info(self, filename, line):
        return extract_location_info(filename, self.sources.get(filename, ''), line)

    def log(self, msg):
        if self.debug:
            print(msg, file=self.out)

    def note(self, msg):
        print(msg, file=self.out)

    def error(self, msg, filename=None, line=0, text=None):
        if filename is None:
            print('error: %s' % msg, file=self.out)
        else:
            info = self.extract_location_info(filename, line)
            if text is None:
                text = info.text
            if info.line:
                print('%s:%d: error: %s' % (info.filename, info.line, msg), file=self.out)
            else:
                print('%s: error: %s' % (info.filename, msg), file=self.out)
            if text:
                print(text, file=self.out)
        self.errors += 1

    def halt_if_errors(self):
        if self.errors:
            raise HaltCompilation('Halting due to %d error(s).' % self.errors)
