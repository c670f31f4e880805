import unittest

from rolltheworld.db.engine import make_engine
from rolltheworld.db.store import DrawStore
from rolltheworld.errors import IntegrityError
from rolltheworld.models import Draw, Participant, PopulationBound


class DrawModelTests(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        self.store = DrawStore(engine=self.engine, population=lambda day: 100, clock=lambda: 20240601)
        self.store.ensure_schema()

    def tearDown(self):
        self.engine.dispose()

    def test_draw_requires_registered_participant(self):
        with self.assertRaises(IntegrityError):
            with self.store.begin() as session:
                session.add(Draw("ghost", 20240601, 5, created_at=1))

    def test_value_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with self.store.begin() as session:
                session.add(Participant("p", created_at=1))
                session.flush()
                session.add(Draw("p", 20240601, 0, created_at=1))

    def test_population_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with self.store.begin() as session:
                session.add(PopulationBound(20240602, 0))

    def test_one_draw_per_participant_and_day(self):
        with self.store.begin() as session:
            session.add(Participant("p", created_at=1))
            session.flush()
            session.add(Draw("p", 20240601, 5, created_at=1))
        with self.assertRaises(IntegrityError):
            with self.store.begin() as session:
                session.add(Draw("p", 20240601, 6, created_at=2))


if __name__ == "__main__":
    unittest.main()
