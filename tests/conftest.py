"""Shared fixtures: small family graph snapshots in the tree route's format."""

import matplotlib
import pytest

matplotlib.use("Agg")


def node(person_id, name=None, gender=None, **data):
    return {"id": person_id, "data": {"full_name": name or str(person_id), "gender": gender, **data}}


def parent(source, target):
    return {"source": source, "target": target, "type": "parent"}


def spouse(source, target, marital_status=None):
    edge = {"source": source, "target": target, "type": "spouse"}
    if marital_status:
        edge["marital_status"] = marital_status
    return edge


@pytest.fixture
def nuclear_family():
    """R (male) married to M (female) with two children."""
    nodes = [
        node("R", "Robert", "male"),
        node("M", "Mary", "female"),
        node("C1", "Carl", "male"),
        node("C2", "Cora", "female"),
    ]
    edges = [
        spouse("R", "M"),
        parent("R", "C1"),
        parent("M", "C1"),
        parent("R", "C2"),
        parent("M", "C2"),
    ]
    return nodes, edges


@pytest.fixture
def polygamous_family():
    """H married to W1 (divorced) and W2, children with each, grandchildren via K1."""
    nodes = [
        node("H", "Henry", "male"),
        node("W1", "Wilma", "female"),
        node("W2", "Wanda", "female"),
        node("K1", "Kurt", "male"),
        node("K2", "Kate", "female"),
        node("K3", "Kim", "female"),
        node("S", "Sara", "female"),
        node("G1", "Gus", "male"),
        node("G2", "Gia", "female"),
    ]
    edges = [
        spouse("H", "W1", "divorced"),
        spouse("H", "W2"),
        parent("H", "K1"),
        parent("W1", "K1"),
        parent("H", "K2"),
        parent("W1", "K2"),
        parent("H", "K3"),
        parent("W2", "K3"),
        spouse("K1", "S"),
        parent("K1", "G1"),
        parent("S", "G1"),
        parent("K1", "G2"),
        parent("S", "G2"),
    ]
    return nodes, edges


@pytest.fixture
def married_in_family():
    """F married to M with children K1 and K2; K2 marries S from outside the family."""
    nodes = [
        node("F", "Frank", "male"),
        node("M", "Maud", "female"),
        node("K1", "Karl", "male"),
        node("K2", "Kira", "female"),
        node("S", "Sam", "male"),
    ]
    edges = [
        spouse("F", "M"),
        parent("F", "K1"),
        parent("M", "K1"),
        parent("F", "K2"),
        parent("M", "K2"),
        spouse("K2", "S"),
    ]
    return nodes, edges
