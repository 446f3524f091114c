"""betlang

Runtime library for a small probabilistic-choice language built around the
ternary `bet` primitive.

The package exposes:
- seeded, per-thread random contexts that make every draw reproducible
- the bet family: uniform, weighted, conditional, lazy, generators
- composition: chaining, repetition, stochastic map/filter, rejection loops
- parametric samplers (one draw per sample) and random walks
- discrete-time Markov chains
- statistics to characterise sampled output: entropy, bootstrap, correlation, chi-square
- a seeded conformance suite with JSON reports
"""

from .composition import (
    bet_chain,
    bet_compose,
    bet_filter,
    bet_map,
    bet_mixture,
    bet_parallel,
    bet_repeat,
    bet_until,
    estimate_probability,
    expected_value,
    sample_n,
)
from .config import RuntimeSpec, load_runtime_spec
from .context import current, depth, seeded, spawn_seeds, with_seed
from .distributions import (
    bernoulli,
    beta,
    binomial,
    cauchy,
    chi_squared,
    exponential,
    gamma,
    log_normal,
    normal,
    pareto,
    poisson,
    random_walk,
    sample_with_replacement,
    sample_without_replacement,
    shuffle,
    student_t,
    triangular,
    uniform,
    uniform_int,
    weibull,
)
from .errors import (
    BetlangError,
    EmptyInput,
    InvalidArgument,
    InvalidMarkovChain,
    InvalidSeed,
    LengthMismatch,
    ZeroExpectedFrequency,
    ZeroWeightSum,
)
from .logger import RunLogger
from .markov import (
    MarkovChain,
    make_markov_chain,
    markov_simulate,
    state_frequencies,
    stationary_distribution,
    transition_matrix,
)
from .selection import Ternary, bet, bet_categorical, bet_conditional, bet_lazy, bet_ternary, bet_weighted, make_generator
from .statistics import (
    bootstrap,
    bootstrap_ci,
    chi_square_pvalue,
    chi_square_test,
    correlation,
    covariance,
    entropy,
    frequency_frame,
    frequency_table,
    mean,
    median,
    mode,
    moving_average,
    percentile,
    stddev,
    summarize,
    variance,
)

__version__ = "0.3.0"

__all__ = [
    "current",
    "depth",
    "seeded",
    "with_seed",
    "spawn_seeds",
    "Ternary",
    "bet",
    "bet_weighted",
    "bet_categorical",
    "bet_conditional",
    "bet_lazy",
    "bet_ternary",
    "make_generator",
    "bet_chain",
    "bet_repeat",
    "bet_compose",
    "bet_map",
    "bet_filter",
    "bet_until",
    "bet_parallel",
    "bet_mixture",
    "estimate_probability",
    "expected_value",
    "sample_n",
    "normal",
    "binomial",
    "poisson",
    "exponential",
    "uniform",
    "uniform_int",
    "bernoulli",
    "log_normal",
    "gamma",
    "beta",
    "chi_squared",
    "student_t",
    "cauchy",
    "weibull",
    "pareto",
    "triangular",
    "random_walk",
    "sample_with_replacement",
    "sample_without_replacement",
    "shuffle",
    "MarkovChain",
    "make_markov_chain",
    "markov_simulate",
    "transition_matrix",
    "stationary_distribution",
    "state_frequencies",
    "mean",
    "median",
    "variance",
    "stddev",
    "mode",
    "percentile",
    "frequency_table",
    "frequency_frame",
    "entropy",
    "correlation",
    "covariance",
    "chi_square_test",
    "chi_square_pvalue",
    "moving_average",
    "bootstrap",
    "bootstrap_ci",
    "summarize",
    "RuntimeSpec",
    "load_runtime_spec",
    "RunLogger",
    "BetlangError",
    "InvalidArgument",
    "EmptyInput",
    "LengthMismatch",
    "ZeroExpectedFrequency",
    "ZeroWeightSum",
    "InvalidMarkovChain",
    "InvalidSeed",
]
