from bfv_psi.report import NULL_INTERSECTION, format_intersection, print_intersection, write_intersection
from bfv_psi.result import ComputationResult, IntersectionStatus


def make_result(intersection, exhausted=False):
    status = IntersectionStatus.NON_EMPTY if intersection else IntersectionStatus.EMPTY
    return ComputationResult(noise_budget=0 if exhausted else 40, intersection=tuple(intersection),
                             status=status, noise_exhausted=exhausted)


def test_table():
    text = format_intersection(make_result(["0001", "1010"]))
    lines = text.splitlines()
    assert lines[0].startswith("Intersection between the two datasets")
    assert "------|------" in lines[2]
    assert lines[3] == " 0001 | 1"
    assert lines[5] == " 1010 | 10"


def test_null_intersection():
    assert format_intersection(make_result([])) == NULL_INTERSECTION


def test_no_computation():
    assert "No computation" in format_intersection(ComputationResult.no_computation())


def test_print_warns_when_unreliable(capsys):
    print_intersection(make_result(["01"], exhausted=True))
    out = capsys.readouterr().out
    assert " 01 " in out
    assert "unreliable" in out

    print_intersection(make_result(["01"]))
    assert "unreliable" not in capsys.readouterr().out


def test_write_intersection(tmp_path):
    path = write_intersection(tmp_path / "out" / "result.txt", make_result(["0001", "1010"]))
    assert path.read_text() == "0001\n1010\n"


def test_write_empty_intersection(tmp_path):
    path = write_intersection(tmp_path / "result.txt", make_result([]))
    assert path.read_text() == ""
