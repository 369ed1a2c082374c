"""
Command line interface for converting delay distribution parameters and looking up
parameters in a parameter table.

Run `epiparameter --help` for details.
"""

import argparse

import epiparameter

PARAM_NAMES = ["mean", "sd", "mu", "sigma", "shape", "scale"]


def _run_convert(args):
    params = {
        name: getattr(args, name)
        for name in PARAM_NAMES
        if getattr(args, name) is not None
    }
    out = epiparameter.convert_params(args.distribution, params)
    for name, val in out.items():
        print(f"{name}: {val}")


def _run_lookup(args):
    table = epiparameter.load_parameter_table(args.table, data_format=args.data_format)
    delay_distrib = epiparameter.epidist(
        table, args.pathogen, delay_dist=args.delay_dist, study=args.study
    )
    print(delay_distrib)


def _run_summary(args):
    table = epiparameter.load_parameter_table(args.table, data_format=args.data_format)
    print(epiparameter.pathogen_summary(table, args.pathogen).to_string(index=False))


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="epiparameter",
        description="Convert and look up delay distribution parameters.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert",
        help=(
            "Convert between the mean and standard deviation and the native parameters"
            " of a distribution."
        ),
    )
    convert_parser.add_argument(
        "distribution",
        choices=["lnorm", "gamma", "weibull"],
        help="Distribution family.",
    )
    for name in PARAM_NAMES:
        convert_parser.add_argument(f"--{name}", type=float, default=None)
    convert_parser.set_defaults(func=_run_convert)

    for command, func, help_text in [
        ("lookup", _run_lookup, "Look up the delay distribution of a pathogen."),
        ("summary", _run_summary, "Summarise the delay distributions of a pathogen."),
    ]:
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("table", help="Path to the parameter table.")
        sub.add_argument("pathogen", help="Pathogen of interest.")
        sub.add_argument(
            "--data_format",
            default="csv",
            help="Format of the parameter table. One of 'csv' or 'excel'.",
        )
        if command == "lookup":
            sub.add_argument(
                "--delay_dist",
                default="incubation",
                help="Delay distribution type. One of "
                + ", ".join(f"'{x}'" for x in epiparameter.DELAY_DISTS)
                + ".",
            )
            sub.add_argument(
                "--study",
                default=None,
                help="Study to use. Defaults to the largest study.",
            )
        sub.set_defaults(func=func)
    return parser


def main(argv=None):
    """
    Entry point for the command line interface.

    Parameters
    ----------
    argv : list of str, optional
        Command line arguments. Default is sys.argv[1:].

    Returns
    -------
    None
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (ValueError, epiparameter.ConvergenceError) as err:
        parser.error(str(err))


if __name__ == "__main__":
    main()
