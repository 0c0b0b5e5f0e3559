"""
copyops: deferred file operations for supervised services

Applies the <base>.copies instruction file written by a host before it
stopped, replacing files that cannot be touched while the host runs.
"""

import logging
import sys
from pathlib import Path

from colorama import init, Fore, Style

from core import BatchRunner, Config, EventEmitter, setup_logging
from core.instructions import Comment, Delete, Execute, Move
from core.paths import InstructionError
from utils.cli_runtime import build_copyops_arg_parser, configure_windows_console_utf8
from utils.process_wait import wait_for_process_exit


def describe(instruction) -> str:
    """One-line human description of a parsed instruction."""
    if isinstance(instruction, Comment):
        return f"comment  {instruction.text}"
    if isinstance(instruction, Delete):
        return f"delete   {instruction.target}"
    if isinstance(instruction, Execute):
        return f"execute  {instruction.command_line.strip()}"
    if isinstance(instruction, Move):
        mode = "replace" if instruction.overwrite else "merge"
        return f"move     {instruction.source} -> {instruction.destination} ({mode})"
    return repr(instruction)


def print_plan(runner: BatchRunner):
    """Print the parsed instruction file for --check."""
    planned = runner.plan()
    if not planned:
        print(Fore.YELLOW + f"No instruction file at {runner.instructions_file}" + Style.RESET_ALL)
        return

    print(f"\n{Fore.CYAN}{'=' * 70}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}INSTRUCTIONS - {runner.instructions_file}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 70}{Style.RESET_ALL}\n")
    for line in planned:
        if line.error:
            print(f"  {Fore.RED}{line.line_number:>4}  ?{Style.RESET_ALL} {line.text}")
        else:
            print(f"  {Fore.GREEN}{line.line_number:>4}  +{Style.RESET_ALL} {describe(line.instruction)}")

    bad = sum(1 for line in planned if line.error)
    print(f"\n  {len(planned)} instruction lines, "
          f"{Fore.RED if bad else Fore.GREEN}{bad} unrecognized{Style.RESET_ALL}\n")


def print_summary(stats: dict, warnings: int):
    """Print the counters collected during a pass."""
    print(f"""
  {Fore.GREEN}[COMPLETE]{Style.RESET_ALL} {Style.DIM}lines:{Style.RESET_ALL} {Fore.WHITE}{stats.get('lines', 0)}{Style.RESET_ALL}
     {Style.DIM}moved........{Style.RESET_ALL} {Fore.GREEN}{stats.get('moved', 0):>4}{Style.RESET_ALL}
     {Style.DIM}merged.......{Style.RESET_ALL} {Fore.CYAN}{stats.get('merged', 0):>4}{Style.RESET_ALL}
     {Style.DIM}deleted......{Style.RESET_ALL} {Fore.GREEN}{stats.get('deleted', 0):>4}{Style.RESET_ALL}
     {Style.DIM}skipped......{Style.RESET_ALL} {Fore.YELLOW}{stats.get('skipped', 0):>4}{Style.RESET_ALL}
     {Style.DIM}failed.......{Style.RESET_ALL} {Fore.RED}{stats.get('failed', 0):>4}{Style.RESET_ALL}
     {Style.DIM}unrecognized.{Style.RESET_ALL} {Fore.RED}{stats.get('unrecognized', 0):>4}{Style.RESET_ALL}
""")
    if warnings:
        print(f"  {Fore.YELLOW}[!] warnings: {warnings} (see log){Style.RESET_ALL}\n")


def main():
    """Main entry point."""
    configure_windows_console_utf8()
    args = build_copyops_arg_parser().parse_args()
    init(strip=True if args.no_color else None)  # Initialize colorama

    config_path = Path(args.config) if args.config else Path('config_files/config.json')
    config = Config(config_path if config_path.exists() else None)

    base = args.base or args.base_pos
    if base:
        config.set('base_path', base)
    if args.working_dir:
        config.set('working_directory', args.working_dir)
    if args.event_log:
        config.set('event_log', args.event_log)

    if not config.base_path:
        print(Fore.RED + "No base path given. Pass BASE_PATH or --base, or set base_path in config." + Style.RESET_ALL)
        sys.exit(1)

    try:
        log_file = setup_logging(config.log_folder, config.max_log_files)
        logging.info("=" * 70)
        logging.info("copyops started")
        logging.info(f"Log file: {log_file}")
        logging.info(f"Instruction file: {config.instructions_file}")
    except OSError as e:
        print(Fore.RED + f"Error setting up logging: {e}" + Style.RESET_ALL)
        sys.exit(1)

    sink = EventEmitter(log_file=config.event_log)
    runner = BatchRunner(config, sink)

    if args.check:
        print_plan(runner)
        return

    if args.wait_pid is not None:
        timeout = args.wait_timeout if args.wait_timeout is not None else config.wait_timeout_seconds
        print(Fore.CYAN + f"Waiting for host process {args.wait_pid} to exit..." + Style.RESET_ALL)
        if not wait_for_process_exit(args.wait_pid, timeout=timeout):
            print(Fore.RED + f"Host process {args.wait_pid} is still running; instructions not applied." + Style.RESET_ALL)
            sys.exit(1)

    try:
        runner.run()
    except (InstructionError, OSError) as e:
        # Instruction file is already gone at this point
        logging.error(f"File operations aborted: {e}", exc_info=True)
        print(Fore.RED + f"File operations aborted: {e}" + Style.RESET_ALL)
        sys.exit(1)

    logging.info("copyops finished")
    print_summary(runner.stats, sink.warning_count)


if __name__ == '__main__':
    main()
