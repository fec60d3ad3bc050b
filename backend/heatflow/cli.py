"""
Command-line driver for heatflow

Usage:
    python -m heatflow climate site.epw
    python -m heatflow compare buildings.csv --format hierarchical --weather site.epw
    python -m heatflow sweep buildings.csv --building building-a --element building-a-1 --value-type rValue
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from heatflow.config import load_environment, setup_logging
from heatflow.models.enums import SweepValueType
from heatflow.models.schemas import CalculatorInputs, CalculatorResults, SweepConfig
from heatflow.services.climate_reducer import read_weather_file
from heatflow.services.error_types import SweepConfigurationError, log_error_with_context
from heatflow.services.flat_importer import import_flat_building
from heatflow.services.heat_transfer import compute
from heatflow.services.hierarchical_importer import import_hierarchical, slugify
from heatflow.services.results_export import build_results_rows, build_sweep_rows, write_csv
from heatflow.services.sensitivity import run_sweep
from heatflow.services.state_store import read_state, write_state

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {path}: {e}")
        return None


def load_inputs(args: argparse.Namespace) -> Optional[CalculatorInputs]:
    """Assemble calculator inputs from state, weather and building files"""
    inputs = CalculatorInputs()
    if args.state:
        state = read_state(args.state)
        if state is None:
            return None
        inputs = state.inputs

    if args.weather:
        climate = read_weather_file(args.weather)
        if climate is None:
            logger.error(f"Weather file {args.weather} could not be reduced")
            return None
        inputs = inputs.model_copy(update={"climate_data": climate})

    buildings_path = Path(args.buildings)
    text = _read_text(buildings_path)
    if text is None:
        return None

    if args.format == "flat":
        column_id = slugify(buildings_path.stem)
        building = import_flat_building(text, column_id=column_id, name=buildings_path.stem,
                                        source_file_name=buildings_path.name)
        if building is None:
            return None
        columns = [b for b in inputs.building_columns if b.id != building.id] + [building]
        inputs = inputs.model_copy(update={"building_columns": columns})
    else:
        imported = import_hierarchical(text, source_file_name=buildings_path.name)
        if imported is None:
            return None
        inputs = imported.apply_to(inputs)

    overrides = {}
    if args.airflow is not None:
        overrides["airflow_rate"] = args.airflow
    if args.current_load is not None:
        overrides["current_energy_load"] = args.current_load
    if overrides:
        inputs = CalculatorInputs.model_validate({**inputs.model_dump(), **overrides})
    return inputs


def format_results(results: CalculatorResults) -> str:
    lines = [f"{'Building':<30} {'Total (Btu/yr)':>16} {'Loss':>14} {'Gain':>14} {'Solar':>14} {'Change %':>9}"]
    for b in results.buildings:
        lines.append(
            f"{b.building_name:<30} {b.total_energy:>16,} {b.envelope_heat_loss:>14,.0f} "
            f"{b.envelope_heat_gain:>14,.0f} {b.solar_heat_gain:>14,.0f} {b.percent_change_vs_current:>9.1f}"
        )
    return "\n".join(lines)


def cmd_climate(args: argparse.Namespace) -> int:
    climate = read_weather_file(
        args.weather_file,
        heating_base_temp=args.heating_base,
        cooling_base_temp=args.cooling_base,
    )
    if climate is None:
        return 1
    print(climate.model_dump_json(by_alias=True, indent=2))
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    inputs = load_inputs(args)
    if inputs is None:
        return 1
    results = compute(inputs)
    print(format_results(results))

    if args.export:
        write_csv(build_results_rows(inputs, results), args.export)
    if args.save_state:
        write_state(args.save_state, inputs, results)
    return 0


def cmd_sweep(args: argparse.Namespace) -> int:
    inputs = load_inputs(args)
    if inputs is None:
        return 1
    config = SweepConfig(
        building_id=args.building,
        element_id=args.element,
        value_type=args.value_type,
        start=args.start,
        step=args.step,
        stop=args.stop,
        title=args.title,
    )
    try:
        result = run_sweep(inputs, config)
    except SweepConfigurationError as e:
        log_error_with_context(e, {'command': 'sweep'})
        return 2

    for point in result.points:
        print(f"{point.value:>8.2f} {point.heat_loss:>16,.0f} {point.energy_saved:>8.2f}%")
    if args.export:
        write_csv(build_sweep_rows(result), args.export)
    return 0


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('buildings', help='Building export (CSV)')
    parser.add_argument('--format', choices=['flat', 'hierarchical'], default='hierarchical',
                        help='Layout of the building export')
    parser.add_argument('--weather', help='Hourly weather file to derive climate data from')
    parser.add_argument('--state', help='Saved state to start from')
    parser.add_argument('--airflow', type=float, help='Infiltration airflow rate (CFM)')
    parser.add_argument('--current-load', type=float, help='Current annual energy load (Btu/year)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='heatflow', description='Building envelope heat-transfer comparison')
    parser.add_argument('--log-level', help='Override HEATFLOW_LOG_LEVEL')
    subparsers = parser.add_subparsers(dest='command', required=True)

    climate = subparsers.add_parser('climate', help='Reduce a weather file to climate data')
    climate.add_argument('weather_file')
    climate.add_argument('--heating-base', type=float, help='Heating base temperature')
    climate.add_argument('--cooling-base', type=float, help='Cooling base temperature')
    climate.set_defaults(handler=cmd_climate)

    compare = subparsers.add_parser('compare', help='Compare annual heat transfer across buildings')
    _add_input_arguments(compare)
    compare.add_argument('--export', help='Write the result table to this CSV file')
    compare.add_argument('--save-state', help='Write inputs and results to this JSON file')
    compare.set_defaults(handler=cmd_compare)

    sweep = subparsers.add_parser('sweep', help='Sweep one element\'s R- or U-value')
    _add_input_arguments(sweep)
    sweep.add_argument('--building', required=True, help='Building id')
    sweep.add_argument('--element', required=True, help='Element id')
    sweep.add_argument('--value-type', choices=[t.value for t in SweepValueType],
                       default=SweepValueType.u_value.value)
    sweep.add_argument('--start', type=float, default=0.1)
    sweep.add_argument('--step', type=float, default=0.05)
    sweep.add_argument('--stop', type=float, default=0.8)
    sweep.add_argument('--title', default='Analysis Chart')
    sweep.add_argument('--export', help='Write the sweep series to this CSV file')
    sweep.set_defaults(handler=cmd_sweep)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    return args.handler(args)


if __name__ == '__main__':
    sys.exit(main())
