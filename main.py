"""
Точка входа. Запуск:
    python main.py add apple add banana check cherry
    python main.py --size 16 --hashes 2 --script commands.txt
    echo "add x" | python main.py --json
"""

import argparse
import json
import logging
import shlex
import sys
from typing import Iterable, List, Optional, TextIO

from bloom_filter import BloomConfig
from bloom_session import BloomSession

COMMANDS = {
    "add": 1, "check": 1, "remove": 1, "params": 2,
    "reset": 0, "show": 0, "history": 0, "replay": 0, "clear-history": 0,
}


# ── Рендер ────────────────────────────────────────────────────────────────────

def render_bits(state: dict, highlight: Iterable[int] = ()) -> str:
    """Битовый массив строкой + линейка индексов каждые 8 позиций."""
    marks = set(highlight)
    cells = []
    for i, bit in enumerate(state['bits']):
        ch = "1" if bit else "0"
        cells.append(f"*{ch}" if i in marks else ch)
    ruler = "".join(str(i // 8 % 10) if i % 8 == 0 else " " for i in range(state['capacity']))
    members = ", ".join(state['members']) or "-"
    n_opt = BloomConfig(state['capacity'], state['hash_count']).optimal_n
    return (f"m={state['capacity']} k={state['hash_count']} "
            f"n={len(state['members'])}/{n_opt} (optimal)\n"
            f"[{''.join(cells)}]\n"
            f" {ruler}\n"
            f"words: {members}")


def render_history(session: BloomSession) -> str:
    entries = session.history.get_history()
    if not entries:
        return "No history entries yet"
    return "\n".join(f"{e.timestamp}  {e.kind.value:<6}  {e.description}" for e in entries)


# ── Команды ───────────────────────────────────────────────────────────────────

def tokenize(lines: Iterable[str]) -> List[List[str]]:
    """Разбить ввод на команды: 'add a check b' -> [['add', 'a'], ['check', 'b']]."""
    tokens = []
    for line in lines:
        # комментарий только с начала незакавыченного слова: c#sharp и "c#" — это слова
        lexer = shlex.shlex(line, posix=False)
        lexer.whitespace_split = True
        lexer.commenters = ""
        raw = []
        for tok in lexer:
            if tok.startswith("#"):
                break
            raw.append(tok)
        tokens.extend(shlex.split(" ".join(raw)))

    commands, i = [], 0
    while i < len(tokens):
        name = tokens[i].lower()
        if name not in COMMANDS:
            raise ValueError(f"unknown command: {tokens[i]}")
        argc = COMMANDS[name]
        args = tokens[i + 1:i + 1 + argc]
        if len(args) < argc:
            raise ValueError(f"{name} expects {argc} argument(s)")
        commands.append([name, *args])
        i += 1 + argc
    return commands


def execute(session: BloomSession, command: List[str], out: TextIO) -> None:
    name, args = command[0], command[1:]

    if name == "add":
        word = args[0].strip()
        if session.add_word(word):
            positions = session.bloom_filter.get_hash_positions(word)
            print(f'added "{word}" -> {positions}', file=out)
        else:
            print(f'Word "{word}" is already in the filter.', file=out)
    elif name == "check":
        result = session.check_word(args[0])
        print(f"{result.message} positions={result.positions}", file=out)
    elif name == "remove":
        if session.remove_word(args[0]):
            print(f'removed "{args[0]}"', file=out)
        else:
            print(f'Word "{args[0]}" is not in the filter.', file=out)
    elif name == "params":
        session.update_filter_params(int(args[0]), int(args[1]))
        print(session.history.get_history()[0].description, file=out)
    elif name == "reset":
        session.reset_filter()
        print("filter reset", file=out)
    elif name == "show":
        print(render_bits(session.filter_state), file=out)
    elif name == "history":
        print(render_history(session), file=out)
    elif name == "replay":
        entry = session.replay_last()
        if entry is None:
            print("No history entries yet", file=out)
        else:
            print(f"replaying: {entry.description}", file=out)
            print(render_bits(entry.payload['filter_state'], entry.payload.get('positions', ())), file=out)
    elif name == "clear-history":
        session.clear_history()
        print("history cleared", file=out)


def run(commands: List[List[str]], config: BloomConfig, out: Optional[TextIO] = None) -> BloomSession:
    if out is None:
        out = sys.stdout
    session = BloomSession(config)
    for command in commands:
        try:
            execute(session, command, out)
        except ValueError as e:
            print(f"error: {e}", file=out)
    return session


def main(argv=None):
    p = argparse.ArgumentParser(description="Inspectable Bloom filter with operation history")
    p.add_argument("commands", nargs="*",               help="Команды: add W, check W, remove W, params M K, reset, show, history, replay, clear-history")
    p.add_argument("--size",    type=int, default=32,   help="Размер битового массива (8-128)")
    p.add_argument("--hashes",  type=int, default=3,    help="Количество хеш-функций (1-5)")
    p.add_argument("--script",  type=str, default=None, help="Файл с командами")
    p.add_argument("--json",    action="store_true",    help="Вывести итоговое состояние и историю в JSON")
    p.add_argument("--verbose", action="store_true",    help="Подробный лог")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.script:
        with open(args.script, encoding="utf-8") as f:
            lines = f.readlines()
    elif args.commands:
        lines = [shlex.join(args.commands)]
    else:
        lines = sys.stdin.readlines()

    try:
        commands = tokenize(lines)
    except ValueError as e:
        p.error(str(e))

    session = run(commands, BloomConfig(args.size, args.hashes))

    if args.json:
        print(json.dumps({
            'filter_state': session.filter_state,
            'history': [e.to_dict() for e in session.history.get_history()],
        }, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
