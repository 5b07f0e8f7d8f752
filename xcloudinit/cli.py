# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""xcloudinit CLI"""

from typing import Optional, Sequence, TextIO

import os
import sys
import argparse
import argcomplete # type: ignore[import]
import json
import colorama # type: ignore[import]
from colorama import Fore, Style

from .config import XCloudInitConfigFile
from .internal_types import Jsonable
from .render import render, decode_rendered
from .version import __version__ as pkg_version

def is_colorizable(stream: TextIO) -> bool:
  is_a_tty = hasattr(stream, 'isatty') and stream.isatty()
  return is_a_tty


class CmdExitError(RuntimeError):
  exit_code: int

  def __init__(self, exit_code: int, msg: Optional[str]=None):
    if msg is None:
      msg = f"Command exited with return code {exit_code}"
    super().__init__(msg)
    self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
  pass

class NoExitArgumentParser(argparse.ArgumentParser):
  def exit(self, status=0, message=None):
    if message:
      self._print_message(message, sys.stderr)
    raise ArgparseExitError(status, message)


class CommandLineInterface:
  _argv: Optional[Sequence[str]]
  _parser: argparse.ArgumentParser
  _args: argparse.Namespace
  _cwd: str

  _cfg: Optional[XCloudInitConfigFile] = None

  _raw_stdout: TextIO = sys.stdout
  _raw_stderr: TextIO = sys.stderr
  _raw: bool = False
  _compact: bool = False
  _output_file: Optional[str] = None
  _encoding: str = 'utf-8'
  _config_file: Optional[str] = None

  _colorize_stdout: bool = False
  _colorize_stderr: bool = False

  def __init__(self, argv: Optional[Sequence[str]]=None):
    self._argv = argv

  def ocolor(self, codes: str) -> str:
    return codes if self._colorize_stdout else ""

  def ecolor(self, codes: str) -> str:
    return codes if self._colorize_stderr else ""

  @property
  def cwd(self) -> str:
    return self._cwd

  def abspath(self, path: str) -> str:
    return os.path.abspath(os.path.join(self.cwd, os.path.expanduser(path)))

  def pretty_print(
        self,
        value: Jsonable,
        compact: Optional[bool]=None,
        raw: Optional[bool]=None,
      ):

    if raw is None:
      raw = self._raw
    if compact is None:
      compact = self._compact

    def emit_to(f: TextIO):
      if raw and isinstance(value, str):
        f.write(value)
        return
      if compact:
        json.dump(value, f, separators=(',', ':'), sort_keys=True)
      else:
        json.dump(value, f, indent=2, sort_keys=True)
      f.write('\n')

    output_file = self._output_file
    if output_file is None:
      emit_to(self._raw_stdout)
    else:
      # newline='' so the CRLF sequences in a rendered document are written untranslated
      with open(self.abspath(output_file), "w", encoding=self._encoding, newline='') as f:
        emit_to(f)

  def cmd_bare(self) -> int:
    print("A command is required", file=sys.stderr)
    return 1

  def cmd_version(self) -> int:
    self.pretty_print(pkg_version)
    return 0

  def get_config(self) -> XCloudInitConfigFile:
    if self._cfg is None:
      self._cfg = XCloudInitConfigFile(config_path=self._config_file, starting_dir=self.cwd)
    return self._cfg

  def cmd_render(self) -> int:
    args = self._args
    text: bool = args.text
    no_gzip: bool = args.no_gzip or text
    no_base64: bool = args.no_base64 or text
    boundary: Optional[str] = args.boundary

    config = self.get_config().create_config(
        gzip=False if no_gzip else None,
        base64_encode=False if no_base64 else None,
        boundary=boundary,
      )
    doc = render(config)
    if self._raw:
      self.pretty_print(doc.rendered)
    else:
      self.pretty_print(doc.to_jsonable())
    return 0

  def cmd_decode(self) -> int:
    args = self._args
    input_file: Optional[str] = args.input_file
    text: bool = args.text
    no_gzip: bool = args.no_gzip or text
    no_base64: bool = args.no_base64 or text

    if input_file is None or input_file == '-':
      rendered = sys.stdin.buffer.read().decode(self._encoding)
    else:
      with open(self.abspath(input_file), encoding=self._encoding, newline='') as f:
        rendered = f.read()
    result = decode_rendered(
        rendered,
        gzip_compressed=not no_gzip,
        base64_encoded=not no_base64,
      )
    self.pretty_print(result, raw=True)
    return 0

  def run(self) -> int:
    """Run the xcloudinit command-line tool with provided arguments

    Args:
        argv (Optional[Sequence[str]], optional):
            A list of commandline arguments (NOT including the program as argv[0]!),
            or None to use sys.argv[1:]. Defaults to None.

    Returns:
        int: The exit code that would be returned if this were run as a standalone command.
    """
    parser = NoExitArgumentParser(description="Render cloud-init user-data as a multi-part MIME document.")

    # ======================= Main command

    self._parser = parser
    parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                        help='Display detailed exception information')
    parser.add_argument('-M', '--monochrome', action='store_true', default=False,
                        help='Output to stdout/stderr in monochrome. Default is to colorize if stream is a compatible terminal')
    parser.add_argument('-c', '--compact', action='store_true', default=False,
                        help='Compact instead of pretty-printed output')
    parser.add_argument('-r', '--raw', action='store_true', default=False,
                        help='''Output raw strings directly, not json-encoded.
                                Values embedded in structured results are not affected.''')
    parser.add_argument('-o', '--output', dest="output_file", default=None,
                        help='Write output value to the specified file instead of stdout')
    parser.add_argument('--text-encoding', default='utf-8',
                        help='The encoding used for text. Default  is utf-8')
    parser.add_argument('-C', '--cwd', default='.',
                        help="Change the effective directory used to search for configuration")
    parser.add_argument('--config',
                        help="Specify the location of the config file")
    parser.set_defaults(func=self.cmd_bare)

    subparsers = parser.add_subparsers(
                        title='Commands',
                        description='Valid commands',
                        help='Additional help available with "xcloudinit <command-name> -h"')

    # ======================= version

    parser_version = subparsers.add_parser('version',
                            description='''Display version information. JSON-quoted string. If a raw string is desired, use -r.''')
    parser_version.set_defaults(func=self.cmd_version)

    # ======================= render

    parser_render = subparsers.add_parser('render',
                            description='''Render the configured cloud-init document. Displays a JSON object
                                           with "id" and "rendered" properties. If only the raw rendered
                                           document is desired, use -r.''')
    parser_render.add_argument('--boundary', default=None,
                        help='Override the MIME boundary token. Default is the configured boundary, or "MIMEBOUNDARY"')
    parser_render.add_argument('--no-gzip', action='store_true', default=False,
                        help='Do not gzip-compress the rendered document')
    parser_render.add_argument('--no-base64', action='store_true', default=False,
                        help='Do not base64-encode the rendered document. Requires --no-gzip')
    parser_render.add_argument('-t', '--text', action='store_true', default=False,
                        help='Render plain text. Equivalent to --no-gzip --no-base64')
    parser_render.set_defaults(func=self.cmd_render)

    # ======================= decode

    parser_decode = subparsers.add_parser('decode',
                            description='''Decode a rendered document back to plain multi-part text.''')
    parser_decode.add_argument('--no-gzip', action='store_true', default=False,
                        help='The document is not gzip-compressed')
    parser_decode.add_argument('--no-base64', action='store_true', default=False,
                        help='The document is not base64-encoded. Requires --no-gzip')
    parser_decode.add_argument('-t', '--text', action='store_true', default=False,
                        help='The document is plain text. Equivalent to --no-gzip --no-base64')
    parser_decode.add_argument('input_file', nargs='?', default=None,
                        help='The file containing the rendered document. Default is stdin')
    parser_decode.set_defaults(func=self.cmd_decode)

    # =========================================================

    argcomplete.autocomplete(parser)
    try:
      args = parser.parse_args(self._argv)
    except ArgparseExitError as ex:
      return ex.exit_code
    traceback: bool = args.traceback
    try:
      self._args = args
      self._raw_stdout = sys.stdout
      self._raw_stderr = sys.stderr
      self._raw = args.raw
      self._compact = args.compact
      self._output_file = args.output_file
      self._encoding = args.text_encoding
      monochrome: bool = args.monochrome
      if not monochrome:
        self._colorize_stdout = is_colorizable(sys.stdout)
        self._colorize_stderr = is_colorizable(sys.stderr)
        if self._colorize_stdout or self._colorize_stderr:
          colorama.init(wrap=False)
          if self._colorize_stderr:
            new_stream = colorama.AnsiToWin32(sys.stderr)
            if new_stream.should_wrap():
              sys.stderr = new_stream
      self._cwd = os.path.abspath(os.path.expanduser(args.cwd))
      config_file: Optional[str] = args.config
      if not config_file is None:
        self._config_file = self.abspath(config_file)
      rc = args.func()
    except Exception as ex:
      if isinstance(ex, CmdExitError):
        rc = ex.exit_code
      else:
        rc = 1
      if rc != 0:
        if traceback:
          raise

        print(f"{self.ecolor(Fore.RED)}xcloudinit: error: {ex}{self.ecolor(Style.RESET_ALL)}", file=sys.stderr)
    return rc

  @property
  def args(self) -> argparse.Namespace:
    return self._args

def run(argv: Optional[Sequence[str]]=None) -> int:
  try:
    rc = CommandLineInterface(argv).run()
  except CmdExitError as ex:
    rc = ex.exit_code
  return rc
