from typing import List, Dict, Sequence

import numpy as np

Vector = Sequence[float]


def dominates(a: Vector, b: Vector) -> bool:
    """True if ``a`` Pareto-dominates ``b``; both vectors are minimised."""
    return all(x <= y for x, y in zip(a, b)) and any(x < y for x, y in zip(a, b))


def fast_non_dominated_sort(vectors: Sequence[Vector]) -> List[List[int]]:
    """
    Performs a fast non-dominated sort on objective vectors (lower is better).
    Returns a list of fronts, where each front is a list of indices in
    ascending order.
    """
    pop_size = len(vectors)
    if pop_size == 0:
        return []
    fronts = [[]]
    domination_counts = [0] * pop_size
    dominated_solutions = [[] for _ in range(pop_size)]

    for i in range(pop_size):
        for j in range(i + 1, pop_size):
            if dominates(vectors[i], vectors[j]):
                dominated_solutions[i].append(j)
                domination_counts[j] += 1
            elif dominates(vectors[j], vectors[i]):
                dominated_solutions[j].append(i)
                domination_counts[i] += 1

    fronts[0] = [i for i in range(pop_size) if domination_counts[i] == 0]

    front_idx = 0
    while len(fronts[front_idx]) > 0:
        next_front = []
        for i in fronts[front_idx]:
            for j in dominated_solutions[i]:
                domination_counts[j] -= 1
                if domination_counts[j] == 0:
                    next_front.append(j)
        front_idx += 1
        fronts.append(sorted(next_front))

    return fronts[:-1]  # The last front is always empty


def crowding_distance_assignment(
    vectors: Sequence[Vector],
    front_indices: List[int]
) -> Dict[int, float]:
    """
    Calculates the crowding distance for each individual in a front.

    Sorting is stable on the front's index order, so equal objective values
    always resolve the same way.
    """
    if not front_indices:
        return {}

    distances = {i: 0.0 for i in front_indices}
    values = np.asarray([vectors[i] for i in front_indices], dtype=float)
    num_objectives = values.shape[1]

    for obj_idx in range(num_objectives):
        order = np.argsort(values[:, obj_idx], kind="stable")
        sorted_front = [front_indices[k] for k in order]
        obj_values = values[order, obj_idx]

        # Assign infinite distance to boundary solutions
        distances[sorted_front[0]] = float('inf')
        distances[sorted_front[-1]] = float('inf')

        min_obj, max_obj = obj_values[0], obj_values[-1]
        if max_obj == min_obj:
            continue

        # Normalize and add distances for intermediate solutions
        for i in range(1, len(sorted_front) - 1):
            distances[sorted_front[i]] += float(obj_values[i + 1] - obj_values[i - 1]) / (max_obj - min_obj)

    return distances
