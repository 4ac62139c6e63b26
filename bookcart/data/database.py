# bookcart/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from bookcart.utils.settings import DATABASE_URL


def _make_engine(url: str):
    #sqlite w pamieci: jedno polaczenie dzielone miedzy watkami (testy)
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


engine = _make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # modele musza byc zarejestrowane w Base.metadata przed create_all
    import bookcart.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
