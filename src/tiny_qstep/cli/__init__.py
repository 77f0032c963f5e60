"""
Command-line interface for tiny-qstep.

Usage:
    tiny-qstep gates
    tiny-qstep run bell
    tiny-qstep run ghz --step 1
    tiny-qstep measure bell --qubits 0 --seed 7
    tiny-qstep info
"""
import argparse
import sys

from ..circuit import CircuitDefinition
from ..config import EngineConfig
from ..exceptions import EngineError
from ..gates import default_library
from ..logging import get_logger, set_log_level
from ..session import CircuitSession
from ..visualization import show_measurement, show_state, show_timeline

logger = get_logger(__name__)


def _bell():
    return CircuitDefinition(2).h(0).cnot(0, 1)


def _ghz():
    return CircuitDefinition(3).h(0).cnot(0, 1).cnot(1, 2)


def _toffoli():
    return CircuitDefinition(3).x(0, column=0).x(1, column=0).toffoli(0, 1, 2)


def _swap():
    return CircuitDefinition(2).x(0).swap(0, 1)


def _phase():
    return CircuitDefinition(1).h(0).s(0).t(0)


DEMOS = {
    'bell': _bell,
    'ghz': _ghz,
    'toffoli': _toffoli,
    'swap': _swap,
    'phase': _phase,
}


def _seed(raw):
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"seed must be non-negative, got {value}")
    return value


def _session(args, config):
    """Load a demo circuit into a fresh session, cursor at ``--step``."""
    seed = getattr(args, 'seed', None)
    session = CircuitSession(config=config, seed=seed)
    session.load_circuit(DEMOS[args.demo]())
    step = session.num_steps - 1 if args.step is None else args.step
    session.jump_to_step(step)
    return session


def cmd_gates(args, config):
    """List the gate library."""
    for gate in default_library():
        print(f"  {gate.label:5s} {gate.arity} qubit(s)  {gate.description}")


def cmd_run(args, config):
    """Replay a demo circuit and show the state at one step."""
    session = _session(args, config)
    print(f"Running '{args.demo}' ({session.num_qubits} qubits)\n")
    print(show_timeline(session.timeline))
    print(f"\nState at step {session.current_step}:")
    print(show_state(session.current_entry.state))


def cmd_measure(args, config):
    """Measure qubits of a demo circuit at one step."""
    session = _session(args, config)
    session.measure(args.qubits)
    print(show_measurement(session.measurement))
    print(f"\nCollapsed state at step {session.current_step}:")
    print(show_state(session.current_entry.state))


def cmd_info(args, config):
    """Show tiny-qstep information."""
    from .. import __version__

    print(f"""
tiny-qstep v{__version__}
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Step-by-step state-vector simulation of small circuits (1-6 qubits).

Gates:  {', '.join(default_library().names)}
Demos:  {', '.join(DEMOS)}

Usage:
  tiny-qstep run ghz
  tiny-qstep measure bell --qubits 0 --seed 7
""")


def main(argv=None):
    """Main CLI entry point. Returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog='tiny-qstep',
        description='Step through small quantum circuits'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Gates command
    gates_parser = subparsers.add_parser('gates', help='List available gates')
    gates_parser.set_defaults(func=cmd_gates)

    # Run command
    run_parser = subparsers.add_parser('run', help='Replay a demo circuit')
    run_parser.add_argument('demo', choices=sorted(DEMOS), help='Demo circuit')
    run_parser.add_argument('--step', type=int, help='Step to show (default: last)')
    run_parser.set_defaults(func=cmd_run)

    # Measure command
    measure_parser = subparsers.add_parser('measure', help='Measure a demo circuit')
    measure_parser.add_argument('demo', choices=sorted(DEMOS), help='Demo circuit')
    measure_parser.add_argument('--qubits', type=int, nargs='+', required=True,
                                help='Qubits to measure')
    measure_parser.add_argument('--seed', type=_seed, help='Sampling seed')
    measure_parser.add_argument('--step', type=int, help='Step to measure at (default: last)')
    measure_parser.set_defaults(func=cmd_measure)

    # Info command
    info_parser = subparsers.add_parser('info', help='Show tiny-qstep info')
    info_parser.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = EngineConfig.from_env()
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    set_log_level('DEBUG' if args.verbose else config.log_level)

    try:
        args.func(args, config)
    except EngineError as exc:
        logger.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
