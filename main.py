from flask import Flask, request, jsonify, current_app, Response
import os
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from werkzeug.utils import secure_filename

from contract_scanner import __version__
from contract_scanner.config import load_settings
from contract_scanner.models import Contract, QARecord
from contract_scanner.services.analysis_orchestrator import run_contract_analysis
from contract_scanner.services.contract_analyzer import ContractAnalyzer
from contract_scanner.services.errors import AIServiceError
from contract_scanner.services.export_service import EXPORT_SCOPES, generate_text
from contract_scanner.services.llm_client import LLMClient
from contract_scanner.services.ocr_service import OCRError, OCRService
from contract_scanner.services.response_extractor import get_extractor
from contract_scanner.services.text_extractor import (
    IMAGE_SUFFIXES,
    SUPPORTED_SUFFIXES,
    TextExtractionError,
    UnsupportedFileTypeError,
    extract_text,
)
from contract_scanner.services.usage_gate import UsageGate
from contract_scanner.store import ContractStore

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 16 * 1024 * 1024  # 16MB


def create_app(settings=None, analyzer=None, store=None, usage_gate=None, ocr=None):
    """
    Build the Flask app. Collaborators default to ones built from settings;
    tests pass their own.
    """
    settings = settings or load_settings()

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config['MAX_CONTENT_LENGTH'] = MAX_FILE_SIZE

    print(f"DEBUG: Flask app created")
    print(f"DEBUG: AI endpoint: {settings.base_url}")
    print(f"DEBUG: AI model: {settings.model}")
    print(f"DEBUG: API key set: {bool(settings.api_key)}")
    print(f"DEBUG: Data dir: {settings.data_dir}")

    if analyzer is None:
        analyzer = ContractAnalyzer(
            LLMClient.from_settings(settings),
            get_extractor(settings.json_extractor)
        )

    app.extensions['contract_scanner'] = {
        'settings': settings,
        'analyzer': analyzer,
        'store': store or ContractStore(settings.contracts_path),
        'usage_gate': usage_gate or UsageGate(settings.usage_path, settings.max_free_usage),
        'ocr': ocr,
    }

    _register_routes(app)
    return app


def _services():
    return current_app.extensions['contract_scanner']


def _ocr() -> OCRService:
    services = _services()
    if services['ocr'] is None:
        services['ocr'] = OCRService(services['settings'].ocr_lang)
    return services['ocr']


def _error(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def _json_body():
    """The request's JSON object; {} when there is no JSON body, None when it isn't an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _string_field(data, key):
    """A JSON field as a string: '' when absent, None when present with another type."""
    value = data.get(key)
    if value is None:
        return ''
    return value if isinstance(value, str) else None


def _find_contract(contract_id):
    contract = _services()['store'].get_contract(contract_id)
    if contract is None:
        logger.warning(f"Contract not found: {contract_id}")
    return contract


def _text_from_upload(file_storage):
    """Save an uploaded file to a temp path, extract its text, then clean up."""
    filename = secure_filename(file_storage.filename or '')
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileTypeError(f"Unsupported file format: {suffix or 'none'}")

    temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    temp_file.close()
    try:
        file_storage.save(temp_file.name)
        ocr = _ocr() if suffix in IMAGE_SUFFIXES else None
        return extract_text(Path(temp_file.name), ocr=ocr)
    finally:
        try:
            if os.path.exists(temp_file.name):
                os.remove(temp_file.name)
        except OSError as e:
            logger.warning(f"Failed to cleanup file {temp_file.name}: {e}")


def _register_routes(app):

    @app.errorhandler(AIServiceError)
    def handle_ai_error(e):
        logger.error(f"AI service error: {type(e).__name__} - {e.message}")
        return _error(e.message, 502)

    @app.errorhandler(OCRError)
    def handle_ocr_error(e):
        return _error(e.message, 422)

    @app.errorhandler(UnsupportedFileTypeError)
    def handle_unsupported_file(e):
        return _error(str(e), 400)

    @app.errorhandler(TextExtractionError)
    def handle_extraction_error(e):
        return _error(str(e), 422)

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'message': 'Contract Scanner API is running',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'version': __version__
        }), 200

    @app.route('/api/contracts', methods=['GET'])
    def list_contracts():
        contracts = _services()['store'].list_contracts()
        return jsonify({
            'success': True,
            'contracts': [c.model_dump(mode='json') for c in contracts],
            'count': len(contracts)
        })

    @app.route('/api/contracts', methods=['POST'])
    def create_contract():
        """
        Create a contract from JSON {title, text}, an uploaded document
        ('file'), or one or more page photos ('images').
        """
        if request.files:
            title = request.form.get('title', '').strip()
            images = request.files.getlist('images')
            if images:
                text = _ocr().recognize_text([image.read() for image in images])
                title = title or f"Scanned contract {datetime.now().strftime('%Y-%m-%d %H:%M')}"
            elif 'file' in request.files and request.files['file'].filename:
                upload = request.files['file']
                text = _text_from_upload(upload)
                title = title or Path(upload.filename).stem
            else:
                return _error('No file selected', 400)
        else:
            data = _json_body()
            if data is None:
                return _error('Request body must be a JSON object', 400)
            title = _string_field(data, 'title')
            text = _string_field(data, 'text')
            if title is None or text is None:
                return _error("'title' and 'text' must be strings", 400)
            title = title.strip()
            if not title or not text.strip():
                return _error("Missing 'title' or 'text' in request body", 400)

        contract = Contract(title=title, original_text=text)
        _services()['store'].add_contract(contract)
        logger.info(f"Contract created: {contract.id} ({len(text)} chars)")
        return jsonify({'success': True, 'contract': contract.model_dump(mode='json')}), 201

    @app.route('/api/contracts/<contract_id>', methods=['GET'])
    def get_contract(contract_id):
        contract = _find_contract(contract_id)
        if contract is None:
            return _error('Contract not found', 404)
        return jsonify({'success': True, 'contract': contract.model_dump(mode='json')})

    @app.route('/api/contracts/<contract_id>', methods=['DELETE'])
    def delete_contract(contract_id):
        if not _services()['store'].delete_contract(contract_id):
            return _error('Contract not found', 404)
        return jsonify({'success': True})

    @app.route('/api/contracts/<contract_id>/analyze', methods=['POST'])
    def analyze_contract(contract_id):
        """Run the AI analysis, gated by free usage / subscription."""
        services = _services()
        contract = _find_contract(contract_id)
        if contract is None:
            return _error('Contract not found', 404)

        if not contract.original_text.strip():
            return _error('Contract has no text to analyze', 400)

        gate = services['usage_gate']
        if not gate.reserve():
            return _error('Free analysis quota used up; subscribe to continue', 402)

        try:
            run_contract_analysis(contract, services['analyzer'], services['store'])
        except AIServiceError as e:
            gate.release()
            logger.error(f"Analysis failed for {contract_id}: {e.message}")
            return jsonify({
                'success': False,
                'error': e.message,
                'contract': contract.model_dump(mode='json')
            }), 502
        except Exception:
            gate.release()
            raise

        gate.commit()
        return jsonify({'success': True, 'contract': contract.model_dump(mode='json')})

    @app.route('/api/contracts/<contract_id>/qa', methods=['GET'])
    def list_questions(contract_id):
        if _find_contract(contract_id) is None:
            return _error('Contract not found', 404)
        records = _services()['store'].get_qa_records(contract_id)
        return jsonify({'success': True, 'records': [r.model_dump(mode='json') for r in records]})

    @app.route('/api/contracts/<contract_id>/qa', methods=['POST'])
    def ask_question(contract_id):
        services = _services()
        contract = _find_contract(contract_id)
        if contract is None:
            return _error('Contract not found', 404)

        data = _json_body()
        if data is None:
            return _error('Request body must be a JSON object', 400)
        question = _string_field(data, 'question')
        if question is None:
            return _error("'question' must be a string", 400)
        question = question.strip()
        if not question:
            return _error("Missing 'question' in request body", 400)

        history = services['store'].get_qa_records(contract_id)
        answer = services['analyzer'].ask_question(question, contract.original_text, history)

        record = services['store'].add_qa_record(
            QARecord(contract_id=contract_id, question=question, answer=answer)
        )
        return jsonify({'success': True, 'record': record.model_dump(mode='json')})

    @app.route('/api/compare', methods=['POST'])
    def compare_contracts():
        data = _json_body()
        if data is None:
            return _error('Request body must be a JSON object', 400)
        id_a = _string_field(data, 'contract_a_id')
        id_b = _string_field(data, 'contract_b_id')
        if id_a is None or id_b is None:
            return _error("'contract_a_id' and 'contract_b_id' must be strings", 400)

        contract_a = _find_contract(id_a)
        contract_b = _find_contract(id_b)
        if contract_a is None or contract_b is None:
            return _error('Both contracts must exist', 404)
        if contract_a.id == contract_b.id:
            return _error('Select two different contracts', 400)

        comparison = _services()['analyzer'].compare_contracts(
            contract_a.original_text, contract_b.original_text
        )
        return jsonify({'success': True, 'comparison': comparison})

    @app.route('/api/explain', methods=['POST'])
    def explain_clause():
        data = _json_body()
        if data is None:
            return _error('Request body must be a JSON object', 400)
        clause = _string_field(data, 'clause')
        context = _string_field(data, 'context')
        contract_id = _string_field(data, 'contract_id')
        if clause is None or context is None or contract_id is None:
            return _error("'clause', 'context' and 'contract_id' must be strings", 400)

        clause = clause.strip()
        if not clause:
            return _error("Missing 'clause' in request body", 400)

        if contract_id:
            contract = _find_contract(contract_id)
            if contract is None:
                return _error('Contract not found', 404)
            context = contract.original_text

        explanation = _services()['analyzer'].explain_clause(clause, context)
        return jsonify({'success': True, 'explanation': explanation})

    @app.route('/api/contracts/<contract_id>/export', methods=['GET'])
    def export_contract(contract_id):
        contract = _find_contract(contract_id)
        if contract is None:
            return _error('Contract not found', 404)

        scope = request.args.get('scope', 'full')
        if scope not in EXPORT_SCOPES:
            return _error(f"Invalid scope; expected one of {', '.join(EXPORT_SCOPES)}", 400)

        text = generate_text(contract, scope)
        filename = secure_filename(f"{contract.title}.txt") or 'contract.txt'
        return Response(
            text,
            mimetype='text/plain; charset=utf-8',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'}
        )

    @app.route('/api/stats', methods=['GET'])
    def stats():
        return jsonify({'success': True, **_services()['store'].stats()})

    @app.route('/api/usage', methods=['GET'])
    def usage():
        gate = _services()['usage_gate']
        return jsonify({
            'success': True,
            'can_analyze': gate.can_analyze(),
            'remaining_free_usage': gate.remaining_free_usage(),
            'subscribed': gate.subscribed
        })


app = create_app()


if __name__ == '__main__':
    logger.info("Starting Contract Scanner API on 0.0.0.0:5000")
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', 5000)), debug=False)
