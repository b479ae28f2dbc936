"""
api_server.py
~~~~~~~~~~~~~

Flask-based REST API server with WebSocket support for neural network training.

This module provides endpoints for:
- Creating and managing networks in memory
- Training networks in the background with progress updates via WebSockets
- Running predictions on single input vectors
- Saving and loading network weights to/from disk

The server uses:
- Flask for REST API endpoints
- Flask-SocketIO for WebSocket communication
- Gevent for async background training tasks
"""

import os
import sys
import uuid
import logging
from typing import Dict, Any, List, Optional

import gevent
import numpy as np
from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO

from mlpnet.config import configure_logging, load_settings
from mlpnet.mnist_loader import scale_pixels
from mlpnet.model_persistence import (
    FormatError,
    load_weights,
    save_weights,
    weight_paths
)
from mlpnet.network import Network
from mlpnet.trainer import evaluate_network, train_network

# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = load_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

# ============================================================================
# FLASK APP SETUP
# ============================================================================

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": "*"}})  # Allow requests from any origin

# SocketIO enables real-time communication (WebSockets) for training updates
socketio = SocketIO(
    app,
    cors_allowed_origins="*",
    async_mode='gevent',
    logger=not settings.production,
    engineio_logger=not settings.production,
    ping_timeout=60,
    ping_interval=25
)

# ============================================================================
# GLOBAL STATE
# ============================================================================

# Networks currently loaded in memory: {network_id: network_info}
active_networks: Dict[str, Dict[str, Any]] = {}

# Training jobs being tracked: {job_id: job_info}
training_jobs: Dict[str, Dict[str, Any]] = {}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def array_to_float_list(array: np.ndarray) -> List[float]:
    """Convert a numpy array to a list of floats (for JSON serialization)."""
    return [float(val) for val in array.flatten()]


def network_summary(network_id: str) -> Dict[str, Any]:
    """Public description of an in-memory network."""
    info = active_networks[network_id]
    net = info['network']
    return {
        'network_id': network_id,
        'architecture': list(net.sizes),
        'learning_rate': net.learning_rate,
        'trained': info['trained'],
        'training': info['training'],
        'accuracy': info['accuracy']
    }


def model_dir_for(network_id: str) -> str:
    """Directory holding the weight files of one network."""
    return os.path.join(settings.model_dir, network_id)


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _positive_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and value > 0
    )


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.route('/api/status', methods=['GET'])
def get_status():
    """
    Return server status and statistics.

    Returns counts of active networks and training jobs that are
    currently in progress (status='pending' or 'training').
    """
    active_statuses = ('pending', 'training')
    active_training = sum(
        1 for job in training_jobs.values()
        if job.get('status') in active_statuses
    )

    return jsonify({
        'status': 'online',
        'active_networks': len(active_networks),
        'training_jobs': active_training
    }), 200


@app.route('/api/networks', methods=['POST'])
def create_network():
    """
    Create a new neural network.

    Request body (optional):
        {
            'input_size': 784,
            'hidden_size': 200,
            'output_size': 10,
            'learning_rate': 0.1
        }

    Returns:
        JSON with network_id, architecture, and status
    """
    data = request.get_json(silent=True) or {}
    input_size = data.get('input_size', settings.input_size)
    hidden_size = data.get('hidden_size', settings.hidden_size)
    output_size = data.get('output_size', settings.output_size)
    learning_rate = data.get('learning_rate', settings.learning_rate)

    for name, value in (('input_size', input_size),
                        ('hidden_size', hidden_size),
                        ('output_size', output_size)):
        if not _positive_int(value):
            logger.warning(f"Invalid {name} requested: {value}")
            return jsonify({'error': f'{name} must be a positive integer'}), 400
    if not _positive_number(learning_rate):
        return jsonify({'error': 'learning_rate must be a positive number'}), 400

    network_id = str(uuid.uuid4())
    net = Network(input_size, hidden_size, output_size, float(learning_rate))

    active_networks[network_id] = {
        'network': net,
        'trained': False,
        'training': False,
        'accuracy': None
    }

    logger.info(f"Created network {network_id}: {net!r}")

    return jsonify({
        'network_id': network_id,
        'architecture': list(net.sizes),
        'status': 'created'
    }), 201


@app.route('/api/networks', methods=['GET'])
def list_networks():
    """List all networks currently held in memory."""
    networks = [network_summary(nid) for nid in active_networks]
    logger.debug(f"Listing {len(networks)} network(s)")
    return jsonify({'networks': networks}), 200


@app.route('/api/networks/<network_id>', methods=['GET'])
def get_network(network_id: str):
    """Describe a single network."""
    if network_id not in active_networks:
        return jsonify({'error': 'Network not found'}), 404
    return jsonify(network_summary(network_id)), 200


@app.route('/api/networks/<network_id>', methods=['DELETE'])
def delete_network_endpoint(network_id: str):
    """Remove a network from memory. Saved weight files are kept."""
    if network_id not in active_networks:
        logger.warning(f"Delete attempted for non-existent network: {network_id}")
        return jsonify({'error': 'Network not found'}), 404
    if active_networks[network_id]['training']:
        return jsonify({'error': 'Network is being trained'}), 409

    del active_networks[network_id]
    logger.info(f"Deleted network {network_id} from memory")

    return jsonify({'network_id': network_id, 'deleted': True}), 200


@app.route('/api/networks/<network_id>/train', methods=['POST'])
def train_network_endpoint(network_id: str):
    """
    Start training a network in the background.

    Request body (all optional):
        {
            'epochs': 5,
            'train_file': 'mnist_dataset/mnist_train.csv'
        }

    Returns:
        JSON with job_id, network_id, and status
    """
    if network_id not in active_networks:
        logger.warning(f"Training requested for non-existent network: {network_id}")
        return jsonify({'error': 'Network not found'}), 404
    if active_networks[network_id]['training']:
        return jsonify({'error': 'Network is already being trained'}), 409

    data = request.get_json(silent=True) or {}
    epochs = data.get('epochs', settings.epochs)
    train_file = data.get('train_file', settings.train_file)

    if not _positive_int(epochs):
        return jsonify({'error': 'epochs must be a positive integer'}), 400
    if not isinstance(train_file, str) or not os.path.exists(train_file):
        return jsonify({'error': f'Training data not found: {train_file}'}), 400

    job_id = str(uuid.uuid4())

    training_jobs[job_id] = {
        'network_id': network_id,
        'status': 'pending',
        'progress': 0,
        'epochs': epochs
    }
    active_networks[network_id]['training'] = True

    logger.info(
        f"Created training job {job_id} for network {network_id}: "
        f"epochs={epochs}, train_file={train_file}"
    )

    # Run training in background so we can return immediately
    socketio.start_background_task(
        train_network_task, network_id, job_id, epochs, train_file
    )

    return jsonify({
        'job_id': job_id,
        'network_id': network_id,
        'status': 'training_started'
    }), 202


def train_network_task(
    network_id: str,
    job_id: str,
    epochs: int,
    train_file: str,
    test_file: Optional[str] = None
) -> None:
    """
    Background task that trains a neural network.

    Sends progress updates via WebSocket as training progresses, then
    scores the network on the test set when one is available.
    """
    info = active_networks[network_id]
    net = info['network']
    if test_file is None:
        test_file = settings.test_file

    def on_epoch_complete(data: Dict[str, Any]) -> None:
        """Called after each training epoch to send progress updates."""
        progress = (data['epoch'] / data['total_epochs']) * 100

        training_jobs[job_id]['status'] = 'training'
        training_jobs[job_id]['progress'] = progress

        socketio.emit('training_update', {
            'job_id': job_id,
            'network_id': network_id,
            'epoch': data['epoch'],
            'total_epochs': data['total_epochs'],
            'loss': data['loss'],
            'elapsed_time': data['elapsed_time'],
            'progress': progress
        })

        # Let gevent send the message immediately
        gevent.sleep(0)

    try:
        logger.info(f"Starting training for job {job_id}")

        # Yield between samples so HTTP requests are processed during training
        def yield_to_other_tasks():
            gevent.sleep(0)

        train_network(
            net,
            train_file,
            epochs,
            callback=on_epoch_complete,
            yield_func=yield_to_other_tasks
        )

        accuracy = None
        if test_file and os.path.exists(test_file):
            accuracy = evaluate_network(net, test_file).accuracy

        info['trained'] = True
        info['accuracy'] = accuracy

        training_jobs[job_id]['status'] = 'completed'
        training_jobs[job_id]['accuracy'] = accuracy
        training_jobs[job_id]['progress'] = 100

        logger.info(f"Training completed for job {job_id}: accuracy {accuracy}")

        socketio.emit('training_complete', {
            'job_id': job_id,
            'network_id': network_id,
            'status': 'completed',
            'accuracy': accuracy,
            'progress': 100
        })
        gevent.sleep(0)

    except Exception as e:
        logger.exception(f"Training failed for job {job_id}: {e}")

        training_jobs[job_id]['status'] = 'failed'
        training_jobs[job_id]['error'] = str(e)

        socketio.emit('training_error', {
            'job_id': job_id,
            'network_id': network_id,
            'status': 'failed',
            'error': str(e)
        })
        gevent.sleep(0)

    finally:
        info['training'] = False


@app.route('/api/training/<job_id>', methods=['GET'])
def get_training_status(job_id: str):
    """Get the current status of a training job."""
    if job_id not in training_jobs:
        logger.warning(f"Status requested for non-existent job: {job_id}")
        return jsonify({'error': 'Training job not found'}), 404
    return jsonify(training_jobs[job_id]), 200


@app.route('/api/networks/<network_id>/predict', methods=['POST'])
def predict_endpoint(network_id: str):
    """
    Run a forward pass.

    Request body, one of:
        {'inputs': [...]}   # already scaled values
        {'pixels': [...]}   # raw 0-255 intensities, scaled by the server

    Returns:
        JSON with the output activations and the predicted class
    """
    if network_id not in active_networks:
        return jsonify({'error': 'Network not found'}), 404

    net = active_networks[network_id]['network']
    data = request.get_json(silent=True) or {}

    if 'inputs' in data:
        values = data['inputs']
    elif 'pixels' in data:
        values = data['pixels']
    else:
        return jsonify({'error': "Request must contain 'inputs' or 'pixels'"}), 400

    if not isinstance(values, list) or len(values) != net.input_size:
        return jsonify({
            'error': f'Expected a list of {net.input_size} numbers'
        }), 400
    try:
        vector = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        return jsonify({'error': 'Inputs must be numbers'}), 400
    if 'inputs' not in data:
        vector = scale_pixels(vector)

    output = net.predict(vector)

    return jsonify({
        'network_id': network_id,
        'output': array_to_float_list(output),
        'predicted': int(np.argmax(output))
    }), 200


@app.route('/api/networks/<network_id>/save', methods=['POST'])
def save_network_endpoint(network_id: str):
    """Write the weights of a network under the model directory."""
    if network_id not in active_networks:
        return jsonify({'error': 'Network not found'}), 404

    net = active_networks[network_id]['network']
    hidden_path, output_path = weight_paths(model_dir_for(network_id))

    try:
        save_weights(net, hidden_path, output_path)
    except OSError as e:
        return jsonify({'error': f'Failed to save weights: {e}'}), 500

    return jsonify({
        'network_id': network_id,
        'hidden_weights': hidden_path,
        'output_weights': output_path,
        'status': 'saved'
    }), 200


@app.route('/api/networks/<network_id>/load', methods=['POST'])
def load_network_endpoint(network_id: str):
    """Replace the weights of a network with its saved ones."""
    if network_id not in active_networks:
        return jsonify({'error': 'Network not found'}), 404
    if active_networks[network_id]['training']:
        return jsonify({'error': 'Network is being trained'}), 409

    net = active_networks[network_id]['network']
    hidden_path, output_path = weight_paths(model_dir_for(network_id))

    try:
        load_weights(net, hidden_path, output_path)
    except FormatError as e:
        return jsonify({'error': f'Stored weights are invalid: {e}'}), 422
    except FileNotFoundError:
        return jsonify({'error': 'No saved weights for this network'}), 404
    except OSError as e:
        return jsonify({'error': f'Failed to load weights: {e}'}), 500

    active_networks[network_id]['trained'] = True

    return jsonify({'network_id': network_id, 'status': 'loaded'}), 200


# ============================================================================
# SERVER STARTUP
# ============================================================================

def main() -> None:
    port = settings.port

    if settings.production:
        logger.info(f"Starting server in production mode on port {port}")
    else:
        logger.info(f"Starting server at http://localhost:{port}/")

    try:
        socketio.run(
            app,
            host='0.0.0.0',
            port=port,
            debug=not settings.production,
            use_reloader=False
        )
    except OSError as e:
        if "Address already in use" in str(e):
            logger.error(f"Port {port} is already in use.")
            sys.exit(1)
        else:
            raise


if __name__ == '__main__':
    main()
