from flask import Flask, render_template, request, jsonify, flash
import logging
import math
import os
from dotenv import load_dotenv

# Load environment variables BEFORE reading configuration
load_dotenv()

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from guideline_checker.services.analysis_orchestrator import (
    run_compliance_check,
    MIN_IDEA_LENGTH,
    MAX_IDEA_LENGTH
)

app = Flask(
    __name__,
    static_folder='guideline_checker/static',
    template_folder='guideline_checker/templates'
)
app.secret_key = os.getenv('SECRET_KEY', 'dev-secret-key')

# Configure Flask for running behind a reverse proxy
from werkzeug.middleware.proxy_fix import ProxyFix
app.wsgi_app = ProxyFix(
    app.wsgi_app,
    x_for=1,      # Trust X-Forwarded-For (client IP)
    x_proto=1,    # Trust X-Forwarded-Proto (http/https)
    x_host=1,     # Trust X-Forwarded-Host (original host)
    x_prefix=1    # Trust X-Forwarded-Prefix (path prefix)
)

app.config.update(
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SAMESITE='Lax'
)

# Submission limits
app.config['MIN_IDEA_LENGTH'] = int(os.getenv('MIN_IDEA_LENGTH', MIN_IDEA_LENGTH))
app.config['MAX_IDEA_LENGTH'] = int(os.getenv('MAX_IDEA_LENGTH', MAX_IDEA_LENGTH))

logger.info(f"OPENAI_API_KEY set: {bool(os.getenv('OPENAI_API_KEY'))}")
logger.info(
    f"Idea length limits: {app.config['MIN_IDEA_LENGTH']}-{app.config['MAX_IDEA_LENGTH']} chars"
)

ANALYSIS_FAILED_MESSAGE = 'Failed to analyze app idea'


@app.template_filter('percent')
def percent_filter(probability):
    """Render a 0-1 probability as a whole percent, halves rounded up."""
    return f"{math.floor(float(probability) * 100 + 0.5)}%"


def _check(app_idea) -> dict:
    return run_compliance_check(
        app_idea,
        min_length=app.config['MIN_IDEA_LENGTH'],
        max_length=app.config['MAX_IDEA_LENGTH']
    )


@app.route('/', methods=['GET', 'POST'])
def index():
    """Render the checker form and, on submission, the analysis report"""
    if request.method == 'GET':
        return render_template('index.html', app_idea='', result=None,
                               min_length=app.config['MIN_IDEA_LENGTH'])

    app_idea = request.form.get('appIdea', '')

    try:
        result = _check(app_idea)
    except ValueError as e:
        flash(str(e), 'warning')
        return render_template('index.html', app_idea=app_idea, result=None,
                               min_length=app.config['MIN_IDEA_LENGTH']), 400
    except Exception:
        logger.exception("Error analyzing app idea")
        flash(ANALYSIS_FAILED_MESSAGE, 'error')
        return render_template('index.html', app_idea=app_idea, result=None,
                               min_length=app.config['MIN_IDEA_LENGTH']), 500

    return render_template('index.html', app_idea=app_idea, result=result,
                           min_length=app.config['MIN_IDEA_LENGTH'])


@app.route('/api/analyze', methods=['POST'])
def analyze_api():
    """Analyze an app idea submitted as JSON {"appIdea": "..."}"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        result = _check(payload.get('appIdea'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        logger.exception("Error analyzing app idea")
        return jsonify({'error': ANALYSIS_FAILED_MESSAGE}), 500

    return jsonify(result)


if __name__ == '__main__':
    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', '5000')),
        debug=False
    )
