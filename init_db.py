# init_db.py
from app import create_app
from extensions import db

# create_app() imports every model, so create_all sees all tables

app = create_app()

if __name__ == "__main__":
    with app.app_context():
        print("Dropping all tables...")
        db.drop_all()
        print("Creating all tables...")
        db.create_all()
        print("Done.")
