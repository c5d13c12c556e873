# Chuks Kitchen - development server entry point

import os

from kitchen import create_app, db

app = create_app(os.environ.get('FLASK_CONFIG'))

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
