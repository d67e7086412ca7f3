"""Balancer stable pool math.

StableSwap invariant and balance solves by Newton-Raphson, as in
Balancer's StableMath.sol. Amounts are 18-decimal values after scaling;
`amp` already includes AMP_PRECISION.

Integer steps go through the checked helpers in `baseline_solver.math.uint`
so intermediate products stay inside uint256 like the contract's.
"""

from dataclasses import replace

from baseline_solver.math import uint
from baseline_solver.math.fixed_point import AMP_PRECISION, Bfp
from baseline_solver.models.types import normalize_address

from .errors import StableGetBalanceDidNotConverge, StableInvariantDidNotConverge, ZeroBalanceError
from .pools import BalancerStablePool

_STABLE_MAX_ITERATIONS = 255


def _check_indices(n_coins: int, token_index_in: int, token_index_out: int) -> None:
    if not 0 <= token_index_in < n_coins:
        raise IndexError(f"token_index_in {token_index_in} out of range for {n_coins} tokens")
    if not 0 <= token_index_out < n_coins:
        raise IndexError(f"token_index_out {token_index_out} out of range for {n_coins} tokens")
    if token_index_in == token_index_out:
        raise ValueError("Cannot swap token with itself")


def calculate_invariant(amp: int, balances: list[Bfp]) -> Bfp:
    """Calculate the StableSwap invariant D.

    Balancer's parameterization multiplies A by n (not n^n); the n^n factor
    comes from the iterative d_p product. Starts from D = sum(balances) and
    stops once consecutive estimates differ by at most 1 wei.

    Args:
        amp: Amplification parameter (scaled by AMP_PRECISION=1000)
        balances: Token balances scaled to 18 decimals

    Returns:
        The invariant D

    Raises:
        StableInvariantDidNotConverge: If 255 iterations do not converge
        ZeroBalanceError: If any balance is zero
    """
    n_coins = len(balances)
    if n_coins == 0:
        return Bfp(0)

    for i, bal in enumerate(balances):
        if bal.value <= 0:
            raise ZeroBalanceError(f"Balance at index {i} must be positive")

    sum_balances = 0
    for bal in balances:
        sum_balances = uint.add(sum_balances, bal.value)

    invariant = sum_balances
    amp_times_n = uint.mul(amp, n_coins)

    for _ in range(_STABLE_MAX_ITERATIONS):
        d_p = invariant
        for bal in balances:
            d_p = uint.div_down(uint.mul(d_p, invariant), uint.mul(bal.value, n_coins))

        prev_invariant = invariant
        numerator = uint.mul(
            uint.add(
                uint.div_down(uint.mul(amp_times_n, sum_balances), AMP_PRECISION),
                uint.mul(d_p, n_coins),
            ),
            invariant,
        )
        denominator = uint.add(
            uint.div_down(uint.mul(uint.sub(amp_times_n, AMP_PRECISION), invariant), AMP_PRECISION),
            uint.mul(n_coins + 1, d_p),
        )
        invariant = uint.div_down(numerator, denominator)

        if abs(invariant - prev_invariant) <= 1:
            return Bfp(invariant)

    raise StableInvariantDidNotConverge(
        f"Stable invariant did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def get_token_balance_given_invariant_and_all_other_balances(
    amp: int,
    balances: list[Bfp],
    invariant: Bfp,
    token_index: int,
) -> Bfp:
    """Solve for balances[token_index] keeping D constant.

    The value currently at `token_index` only enters through the `c` term,
    which matches the contract.

    Raises:
        StableGetBalanceDidNotConverge: If iteration doesn't converge
        IndexError: If token_index is out of range
    """
    n_coins = len(balances)
    if not 0 <= token_index < n_coins:
        raise IndexError(f"token_index {token_index} out of range for {n_coins} tokens")

    d = invariant.value
    amp_times_total = uint.mul(amp, n_coins)

    sum_balances = balances[0].value
    p_d = uint.mul(balances[0].value, n_coins)
    for j in range(1, n_coins):
        p_d = uint.div_down(uint.mul(uint.mul(p_d, balances[j].value), n_coins), d)
        sum_balances = uint.add(sum_balances, balances[j].value)

    sum_others = uint.sub(sum_balances, balances[token_index].value)
    inv2 = uint.mul(d, d)

    # c = inv2 / (ampTimesTotal * P_D) * AMP_PRECISION * balance[tokenIndex]
    c = uint.mul(
        uint.mul(uint.div_up(inv2, uint.mul(amp_times_total, p_d)), AMP_PRECISION),
        balances[token_index].value,
    )
    b = uint.add(sum_others, uint.mul(uint.div_down(d, amp_times_total), AMP_PRECISION))

    token_balance = uint.div_up(uint.add(inv2, c), uint.add(d, b))

    for _ in range(_STABLE_MAX_ITERATIONS):
        prev_token_balance = token_balance

        denominator = 2 * token_balance + b - d
        if denominator <= 0:
            raise StableGetBalanceDidNotConverge("Denominator became non-positive")

        token_balance = uint.div_up(
            uint.add(uint.mul(token_balance, token_balance), c),
            denominator,
        )

        if abs(token_balance - prev_token_balance) <= 1:
            return Bfp(token_balance)

    raise StableGetBalanceDidNotConverge(
        f"Stable get_balance did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def stable_calc_out_given_in(
    amp: int,
    balances: list[Bfp],
    token_index_in: int,
    token_index_out: int,
    amount_in: Bfp,
) -> Bfp:
    """Output for an exact input; the fee is deducted by the caller.

    Returns old_balance_out - new_balance_out - 1, or zero when the solved
    balance does not drop.

    Raises:
        StableInvariantDidNotConverge: If invariant calculation doesn't converge
        StableGetBalanceDidNotConverge: If balance calculation doesn't converge
        ValueError: If token_index_in == token_index_out
        IndexError: If token indices are out of range
    """
    _check_indices(len(balances), token_index_in, token_index_out)

    invariant = calculate_invariant(amp, balances)

    new_balances = list(balances)
    new_balances[token_index_in] = balances[token_index_in].add(amount_in)

    new_balance_out = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_out
    ).value
    old_balance_out = balances[token_index_out].value

    if new_balance_out >= old_balance_out:
        return Bfp(0)
    return Bfp(old_balance_out - new_balance_out - 1)


def stable_calc_in_given_out(
    amp: int,
    balances: list[Bfp],
    token_index_in: int,
    token_index_out: int,
    amount_out: Bfp,
) -> Bfp:
    """Input for an exact output, before the fee is added.

    Returns new_balance_in - old_balance_in + 1.

    Raises:
        StableInvariantDidNotConverge: If invariant calculation doesn't converge
        StableGetBalanceDidNotConverge: If balance calculation doesn't converge
        ZeroBalanceError: If amount_out >= balance_out
        ValueError: If token_index_in == token_index_out
        IndexError: If token indices are out of range
    """
    _check_indices(len(balances), token_index_in, token_index_out)

    if amount_out >= balances[token_index_out]:
        raise ZeroBalanceError("amount_out must be less than balance_out")

    invariant = calculate_invariant(amp, balances)

    new_balances = list(balances)
    new_balances[token_index_out] = balances[token_index_out].sub(amount_out)

    new_balance_in = get_token_balance_given_invariant_and_all_other_balances(
        amp, new_balances, invariant, token_index_in
    )
    return Bfp(uint.sub(new_balance_in.value, balances[token_index_in].value) + 1)


def filter_bpt_token(pool: BalancerStablePool) -> BalancerStablePool:
    """Drop the pool's own BPT token from composable stable pool reserves.

    Composable stable pools list their BPT (whose address is the pool
    address) among the reserves; it takes no part in the swap math.
    """
    pool_address = normalize_address(pool.address)
    filtered = tuple(r for r in pool.reserves if normalize_address(r.token) != pool_address)
    if len(filtered) == len(pool.reserves):
        return pool
    return replace(pool, reserves=filtered)
