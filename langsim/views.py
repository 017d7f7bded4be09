import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .budget import Budget
from .cfg_derivation import derive
from .definitions import build_finite_automaton, build_grammar, build_pushdown_automaton, build_turing_machine
from .fa_properties import is_complete, is_deterministic, nondeterministic_choices
from .fa_simulation import LITERAL, simulate_finite_automaton
from .fa_transformations import minimise_dfa, subset_construction
from .pda_simulation import FIRST_MATCH, simulate_pda
from .tm_simulation import simulate_tm

logger = logging.getLogger(__name__)

# Request key -> Budget field
BUDGET_FIELDS = (
    ('maxSteps', 'max_steps'),
    ('maxDepth', 'max_depth'),
    ('maxNodes', 'max_nodes'),
)


@csrf_exempt
@require_POST
def simulate_fa(request):
    """
    Django view to handle finite automaton simulation requests.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton definition
    - input: The input string to simulate
    - mode: 'dfa' or 'nfa' (optional, detected from the automaton when missing)
    - epsilonMode: 'literal' or 'closure' (optional, NFA only)

    Returns a JSON response with simulation results.
    """
    try:
        data = _parse_body(request)
        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = build_finite_automaton(data['automaton'])
        result = simulate_finite_automaton(
            automaton,
            _input_string(data, 'input'),
            mode=data.get('mode'),
            epsilon_mode=data.get('epsilonMode', LITERAL)
        )
        return JsonResponse(result.to_dict())

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Finite automaton simulation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_fa_type(request):
    """
    Django view to check if a finite automaton is deterministic or non-deterministic.
    """
    try:
        data = _parse_body(request)
        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = build_finite_automaton(data['automaton'])
        deterministic = is_deterministic(automaton)

        return JsonResponse({
            'isDeterministic': deterministic,
            'type': 'DFA' if deterministic else 'NFA',
            'description': 'Deterministic Finite Automaton' if deterministic else 'Non-deterministic Finite Automaton',
            'isComplete': is_complete(automaton),
            'nondeterministicChoices': nondeterministic_choices(automaton)
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Finite automaton type check failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def convert_subset_construction(request):
    """
    Django view to convert a finite automaton to an equivalent DFA.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton definition
    - epsilonMode: 'literal' or 'closure' (optional)
    - addDeadState: Whether to complete the DFA with a dead state (optional)
    """
    try:
        data = _parse_body(request)
        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = build_finite_automaton(data['automaton'])
        dfa = subset_construction(
            automaton,
            epsilon_mode=data.get('epsilonMode', LITERAL),
            add_dead_state=bool(data.get('addDeadState', False))
        )

        return JsonResponse({
            'original': automaton.to_dict(),
            'dfa': dfa.to_dict()
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Subset construction failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def minimise(request):
    """
    Django view to minimise a deterministic finite automaton.

    Expects a POST request with a JSON body containing:
    - automaton: The DFA definition
    """
    try:
        data = _parse_body(request)
        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = build_finite_automaton(data['automaton'])
        minimised = minimise_dfa(automaton)

        return JsonResponse({
            'original': automaton.to_dict(),
            'minimised': minimised.to_dict()
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("DFA minimisation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_pushdown(request):
    """
    Django view to handle pushdown automaton simulation requests.

    Expects a POST request with a JSON body containing:
    - automaton: The PDA definition
    - input: The input string to simulate
    - mode: 'first-match' or 'search' (optional)
    - maxSteps / maxNodes: Budget overrides (optional, capped by settings)
    """
    try:
        data = _parse_body(request)
        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = build_pushdown_automaton(data['automaton'])
        result = simulate_pda(
            automaton,
            _input_string(data, 'input'),
            budget=_request_budget(data, 'pda'),
            mode=data.get('mode', FIRST_MATCH)
        )
        return JsonResponse(result.to_dict())

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("PDA simulation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_turing(request):
    """
    Django view to handle Turing machine simulation requests.

    Expects a POST request with a JSON body containing:
    - machine: The Turing machine definition
    - input: The initial tape contents
    - maxSteps: Budget override (optional, capped by settings)
    """
    try:
        data = _parse_body(request)
        if not data.get('machine'):
            return JsonResponse({'error': 'Missing machine definition'}, status=400)

        machine = build_turing_machine(data['machine'])
        result = simulate_tm(machine, _input_string(data, 'input'), budget=_request_budget(data, 'tm'))
        return JsonResponse(result.to_dict())

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Turing machine simulation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def derive_cfg(request):
    """
    Django view to search for a leftmost derivation of a target string.

    Expects a POST request with a JSON body containing:
    - grammar: The grammar definition
    - target: The string to derive
    - maxDepth / maxNodes: Budget overrides (optional, capped by settings)
    """
    try:
        data = _parse_body(request)
        if not data.get('grammar'):
            return JsonResponse({'error': 'Missing grammar definition'}, status=400)

        grammar = build_grammar(data['grammar'])
        result = derive(grammar, _input_string(data, 'target'), budget=_request_budget(data, 'cfg'))
        return JsonResponse(result.to_dict())

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("CFG derivation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


def _parse_body(request) -> dict:
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')
    return data


def _input_string(data: dict, key: str) -> str:
    value = data.get(key, '')
    if not isinstance(value, str):
        raise ValueError(f'{key} must be a string')
    return value


def _request_budget(data: dict, kind: str) -> Budget:
    """
    Builds the run budget from the request, falling back to the configured
    defaults for ``kind`` and capping every value at the ceiling configured
    for that kind.
    """
    defaults = settings.LANGSIM_DEFAULT_BUDGETS.get(kind, {})
    ceilings = settings.LANGSIM_BUDGET_CEILINGS.get(kind, {})

    values = {}
    for key, field in BUDGET_FIELDS:
        value = data.get(key, defaults.get(key))
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f'{key} must be an integer')
        if key in ceilings:
            value = min(value, ceilings[key])
        values[field] = value

    return Budget(**values)
