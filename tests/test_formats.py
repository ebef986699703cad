"""Tests for body files and snapshot output."""

import warnings

import pytest

from nbody_octree.formats import (
    SNAPSHOT_HEADER,
    SnapshotWriter,
    format_bodies,
    format_snapshot,
    parse_bodies,
    read_bodies,
    write_bodies,
)
from nbody_octree.formats.bodies import format_body, parse_body
from nbody_octree.generators import uniform_cube
from nbody_octree.types import Body
from nbody_octree.validation import BodyFileWarning, InvalidInputError

SAMPLE = """0,1.0,2.0,3.0,0.1,0.2,0.3,5e29,1000.0
1,-1.0,-2.0,-3.0,0.0,0.0,0.0,1e30,0.0
"""


class TestFormatBodies:
    """Tests for writing body records."""

    def test_record_layout(self):
        """index,px,py,pz,vx,vy,vz,mass,radius."""
        body = Body(position=(1, 2, 3), velocity=(4, 5, 6), mass=7.0, radius=8.0, index=0)
        assert format_body(body) == "0,1.0,2.0,3.0,4.0,5.0,6.0,7.0,8.0"

    def test_one_line_per_body(self):
        store = uniform_cube(5, seed=1)
        text = format_bodies(store)
        assert text.endswith("\n")
        assert len(text.splitlines()) == 5


class TestParseBodies:
    """Tests for reading body records."""

    def test_parse_sample(self):
        """Fields land in the right attributes."""
        store = parse_bodies(SAMPLE)
        assert len(store) == 2
        assert store[0].position.tolist() == [1.0, 2.0, 3.0]
        assert store[0].velocity.tolist() == [0.1, 0.2, 0.3]
        assert store[0].mass == 5e29
        assert store[0].radius == 1000.0
        assert store[1].index == 1

    def test_final_newline_optional(self):
        """The last record may omit its newline."""
        assert len(parse_bodies(SAMPLE.rstrip("\n"))) == 2

    def test_blank_lines_skipped(self):
        assert len(parse_bodies("\n" + SAMPLE + "\n\n")) == 2

    def test_round_trip_is_exact(self):
        """Writing then reading gives bit-identical values."""
        store = uniform_cube(25, seed=13)
        parsed = parse_bodies(format_bodies(store))
        for original, copy in zip(store, parsed):
            assert copy.position.tolist() == original.position.tolist()
            assert copy.velocity.tolist() == original.velocity.tolist()
            assert copy.mass == original.mass
            assert copy.radius == original.radius
            assert copy.index == original.index

    def test_repeated_index_ends_data(self):
        """A record repeating the previous index is a sentinel."""
        text = SAMPLE + "1,0,0,0,0,0,0,1,0\n"
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            store = parse_bodies(text)
        assert len(store) == 2

    def test_data_after_sentinel_warns(self):
        """Records after the sentinel are ignored with a warning."""
        text = SAMPLE + "1,0,0,0,0,0,0,1,0\n2,0,0,0,0,0,0,1,0\n"
        with pytest.warns(BodyFileWarning, match="1 further line"):
            store = parse_bodies(text)
        assert len(store) == 2

    def test_wrong_field_count(self):
        """Malformed records name their line."""
        text = SAMPLE.splitlines()[0] + "\n1,2,3\n"
        with pytest.raises(InvalidInputError, match="line 2: expected 9 fields"):
            parse_bodies(text)

    def test_non_numeric_field(self):
        with pytest.raises(InvalidInputError, match="line 1"):
            parse_body("0,a,0,0,0,0,0,1,0", 1)

    def test_non_positive_mass(self):
        """Body validation errors carry the line number."""
        with pytest.raises(InvalidInputError, match="line 1: mass must be positive"):
            parse_bodies("0,0,0,0,0,0,0,-5,0\n")

    def test_index_out_of_order(self):
        """Indices must count up from zero."""
        with pytest.raises(InvalidInputError, match="does not match its slot"):
            parse_bodies("0,0,0,0,0,0,0,1,0\n2,1,0,0,0,0,0,1,0\n")


class TestBodyFiles:
    """Tests for file IO."""

    def test_write_then_read(self, tmp_path):
        store = uniform_cube(10, seed=2)
        path = write_bodies(store, tmp_path / "bodies.csv")
        loaded = read_bodies(path)
        assert len(loaded) == 10
        assert loaded[9].position.tolist() == store[9].position.tolist()

    def test_missing_file(self, tmp_path):
        """A missing file is an input error."""
        with pytest.raises(InvalidInputError, match="cannot read body file"):
            read_bodies(tmp_path / "absent.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(InvalidInputError, match="contains no bodies"):
            read_bodies(path)


class TestSnapshots:
    """Tests for snapshot text and the numbered writer."""

    def test_format(self):
        """Header then x,y,z,radius per body."""
        bodies = [
            Body(position=(1, 2, 3), radius=4.0, index=0),
            Body(position=(-1, 0, 0.5), radius=0.0, index=1),
        ]
        assert format_snapshot(bodies) == (
            f"{SNAPSHOT_HEADER}\n1.0,2.0,3.0,4.0\n-1.0,0.0,0.5,0.0\n"
        )

    def test_writer_numbering(self, tmp_path):
        """Each call writes the next numbered file, creating the directory."""
        writer = SnapshotWriter(tmp_path / "nested" / "dir", "galaxy")
        bodies = [Body(position=(0, 0, 0), index=0)]
        first = writer(bodies)
        second = writer(bodies)
        assert first.name == "galaxy.csv.0"
        assert second.name == "galaxy.csv.1"
        assert writer.count == 2
        assert second.read_text().startswith(SNAPSHOT_HEADER)

    def test_path_for(self, tmp_path):
        writer = SnapshotWriter(tmp_path, "x")
        assert writer.path_for(7) == tmp_path / "x.csv.7"
