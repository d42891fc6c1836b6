"""
Smoke tests for the benchmark runner.

Run with: pytest tests/test_run_local_search.py -v
"""

import json

import pytest

from experiments.run_local_search import create_instances, main, parse_args


@pytest.mark.parametrize('problem,size', [
    ('tsp', 10),
    ('nqueens', 8),
    ('ufl', 6),
    ('kmedian', 6),
])
def test_main_writes_results(tmp_path, problem, size):
    out_path = main([
        '--problem', problem,
        '--size', str(size),
        '--num-clients', '12',
        '--k', '3',
        '--num-instances', '2',
        '--max-rounds', '300',
        '--results-dir', str(tmp_path),
        '--run-name', 'smoke',
    ])

    assert out_path == str(tmp_path / 'smoke.json')
    with open(out_path) as f:
        saved = json.load(f)

    assert saved['args']['problem'] == problem
    results = saved['results']
    assert len(results) == 2 * 3
    assert {r['strategy'] for r in results} == {'first_improving', 'best_improving', 'annealing'}
    for result in results:
        assert result['final_cost'] <= result['initial_cost'] + 1e-9
        assert result['rounds'] <= 301
        # initial and final cost only; gains and comparisons are not counted
        assert result['evaluations'] == 2


def test_single_strategy(tmp_path):
    out_path = main([
        '--problem', 'tsp', '--size', '8', '--num-instances', '1',
        '--strategies', 'best_improving',
        '--results-dir', str(tmp_path), '--run-name', 'best',
    ])
    with open(out_path) as f:
        results = json.load(f)['results']

    assert [r['strategy'] for r in results] == ['best_improving']


def test_instance_file(tmp_path):
    instance = tmp_path / 'pmed_tiny.txt'
    instance.write_text("3 2 1\n1 2 1\n2 3 1\n")

    problems = create_instances(parse_args(['--problem', 'kmedian', '--instance', str(instance)]))

    assert len(problems) == 1
    assert problems[0].k == 1


def test_nqueens_has_no_instance_format(tmp_path):
    args = parse_args(['--problem', 'nqueens', '--instance', str(tmp_path / 'x.txt')])
    with pytest.raises(ValueError):
        create_instances(args)
