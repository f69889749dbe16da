#!/usr/bin/env python3
"""
Posterior Probabilities of Hypotheses from the Command Line

Computes PPHs for one study, or combines several studies sequentially,
and optionally saves the standard figures.

Usage:
    # Single study with the automatic prior
    python scripts/run_combination.py --beta -0.252 --se-beta 0.099

    # Flatter prior
    python scripts/run_combination.py --beta -0.252 --se-beta 0.099 --se-mult 2

    # Several studies, interval null, save figures
    python scripts/run_combination.py --beta 2.3 1.2 0.2 0.44 \\
        --se-beta 1.03 0.75 0.16 0.28 --null -0.05 0.05 --plot example

    # Show per-study debug logging
    python scripts/run_combination.py --beta 2.3 1.2 --se-beta 1.03 0.75 --verbose
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import matplotlib.pyplot as plt

from bayescombo.config import DEFAULT_CONFIG
from bayescombo.evidence import compute_evidence
from bayescombo.combination import ev_combo
from bayescombo.exceptions import BayesComboError, CombinationError
from bayescombo.summary import summarize
from bayescombo.plotting import plot_distributions, create_summary_figure
from bayescombo.figure_style import setup_style, save_figure


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Posterior probabilities of directional hypotheses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Data
    parser.add_argument("--beta", type=float, nargs="+", required=True,
                        help="Effect size(s), in the order to combine")
    parser.add_argument("--se-beta", type=float, nargs="+", required=True,
                        help="Standard error(s) of the effect size(s)")

    # Prior on the effect size
    parser.add_argument("--beta0", type=float, default=None,
                        help="Prior mean (default 0)")
    parser.add_argument("--se0", type=float, default=None,
                        help="Prior standard error (default: derived per study)")
    parser.add_argument("--se-mult", type=float, default=DEFAULT_CONFIG["se_mult"],
                        help="Multiplier on the prior standard error")
    parser.add_argument("--ci", type=float, default=DEFAULT_CONFIG["ci"],
                        help="Confidence level (percent) for the automatic prior")

    # Hypotheses
    parser.add_argument("--null", type=float, nargs="+", default=[0.0],
                        help="Point null, or lower and upper bounds of an interval null")
    parser.add_argument("--priors", type=float, nargs=3, default=None,
                        metavar=("NEG", "ZERO", "POS"),
                        help="Prior probabilities of H<0, H=0, H>0")

    # Combination options
    parser.add_argument("--scale", action="store_true",
                        help="Standardise effect sizes before combining")
    parser.add_argument("--adjust", action="store_true",
                        help="Keep near-zero probabilities revivable between studies")

    # Output
    parser.add_argument("--digits", type=int, default=None,
                        help="Decimals in the summary")
    parser.add_argument("--plot", metavar="NAME", default=None,
                        help="Save figures as output/figures/NAME.{png,pdf}")
    parser.add_argument("--show", action="store_true",
                        help="Show figures interactively")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(args.beta) != len(args.se_beta):
        parser.error("--beta and --se-beta need the same number of values")
    if len(args.null) > 2:
        parser.error("--null takes one or two values")

    options = dict(
        beta0=args.beta0,
        se0=args.se0,
        se_mult=args.se_mult,
        ci=args.ci,
        null_region=args.null,
        priors=args.priors if args.priors is not None else DEFAULT_CONFIG["priors"],
    )

    try:
        if len(args.beta) == 1:
            result = compute_evidence(args.beta[0], args.se_beta[0], **options)
            digits = 3 if args.digits is None else args.digits
        else:
            result = ev_combo(args.beta, args.se_beta,
                              scale=args.scale, adjust=args.adjust, **options)
            digits = 1 if args.digits is None else args.digits
    except CombinationError as e:
        print(f"Error: combination failed at study {e.study_index} ({e.region}): {e}")
        for i, record in enumerate(e.partial, start=1):
            print(f"  study {i}: PPH = {record.posterior_probs.as_tuple()}")
        sys.exit(1)
    except BayesComboError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(summarize(result, digits=digits))

    if args.plot or args.show:
        setup_style()
        if len(args.beta) == 1:
            fig, ax = plt.subplots()
            plot_distributions(result, ax=ax)
        else:
            fig = create_summary_figure(result)

        if args.plot:
            for path in save_figure(fig, args.plot):
                print(f"Saved: {path}")
        if args.show:
            plt.show()
        plt.close(fig)


if __name__ == "__main__":
    main()
