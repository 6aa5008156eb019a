import databases
import sqlalchemy
from intakeapi.config import config

metadata = sqlalchemy.MetaData()


spreadsheet_table = sqlalchemy.Table(
    "spreadsheet",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(256), nullable=False, unique=True),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, default=sqlalchemy.func.now()),
)

# one sheet per form type; header is fixed by the first submission
sheet_table = sqlalchemy.Table(
    "sheet",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("spreadsheet_id", sqlalchemy.ForeignKey("spreadsheet.id"), nullable=False),
    sqlalchemy.Column("name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("header", sqlalchemy.JSON, nullable=False),  # ["Timestamp", "Form Type", ...]
    sqlalchemy.Column("header_bold", sqlalchemy.Boolean, default=False),
    sqlalchemy.Column("frozen_rows", sqlalchemy.Integer, default=0),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, default=sqlalchemy.func.now()),
    sqlalchemy.UniqueConstraint(
        "spreadsheet_id", "name",
        name="uq_sheet_name_per_spreadsheet"
    ),
)

sheetrow_table = sqlalchemy.Table(
    "sheet_row",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("sheet_id", sqlalchemy.ForeignKey("sheet.id"), nullable=False),
    sqlalchemy.Column("cells", sqlalchemy.JSON, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, default=sqlalchemy.func.now()),
)


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}
engine = sqlalchemy.create_engine(config.DATABASE_URL, connect_args=connect_args)

metadata.create_all(engine)
database = databases.Database(
    config.DATABASE_URL, force_rollback=config.DB_FORCE_ROLL_BACK
)
