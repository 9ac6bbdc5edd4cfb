import io
import os
import time
import logging
import tempfile
from flask import Flask, request, send_file, render_template_string, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from brands import get_brand
from image_store import ImageStore, UnsupportedImageError, is_supported
from pdf_service import PDFOptions, ValidationError, generate_pdf_from_images, validate_request

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['BRAND'] = os.environ.get('IMG2PDF_BRAND', 'pypdf-pro')
app.config['UPLOAD_DIR'] = os.environ.get('IMG2PDF_UPLOAD_DIR', tempfile.gettempdir())
app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('IMG2PDF_MAX_UPLOAD_MB', 200)) * 1024 * 1024

# Single-user local tool: selected images and conversion progress live in process memory
IMAGE_STORE = ImageStore(app.config['UPLOAD_DIR'])
CONVERSION_STATE = {'progress': 0, 'generating': False}


def current_brand():
    return get_brand(app.config['BRAND'])


def _set_progress(value):
    CONVERSION_STATE['progress'] = value


# --- FLASK ROUTES ---

@app.route('/')
def index():
    brand = current_brand()
    return render_template_string(HTML_TEMPLATE, brand=brand.to_dict())

@app.route('/config', methods=['GET'])
def get_config():
    return jsonify(current_brand().to_dict())

@app.route('/upload', methods=['POST'])
def upload_files():
    files = [f for f in request.files.getlist('files') + request.files.getlist('file') if f.filename]
    if not files: return jsonify({'error': 'No selected file'}), 400

    rejected = [f.filename for f in files if not is_supported(f.filename)]
    if rejected:
        return jsonify({'error': f"Unsupported file type: {', '.join(rejected)}. Supports JPG, PNG, and JPEG."}), 400

    try:
        added = [IMAGE_STORE.add(f.filename, f.stream, f.mimetype) for f in files]
    except UnsupportedImageError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'images': [img.to_dict() for img in added], 'count': len(IMAGE_STORE)})

@app.route('/images', methods=['GET'])
def list_images():
    return jsonify({'images': [img.to_dict() for img in IMAGE_STORE.list()], 'count': len(IMAGE_STORE)})

@app.route('/images/<image_id>', methods=['DELETE'])
def remove_image(image_id):
    if not IMAGE_STORE.remove(image_id): return jsonify({'error': 'File not found'}), 404
    return jsonify({'removed': image_id, 'count': len(IMAGE_STORE)})

@app.route('/images', methods=['DELETE'])
def clear_images():
    removed = IMAGE_STORE.clear()
    return jsonify({'removed': removed, 'count': 0})

@app.route('/preview/<image_id>', methods=['GET'])
def preview(image_id):
    image = IMAGE_STORE.get(image_id)
    if image is None: return jsonify({'error': 'File not found'}), 404
    return send_file(image.path, mimetype=image.content_type)

@app.route('/convert', methods=['POST'])
def convert():
    brand = current_brand()
    data = request.get_json(silent=True)
    if data is None: data = {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object', 'code': 'bad_options'}), 400
    images = IMAGE_STORE.list()
    try:
        options = PDFOptions.from_dict(data.get('options', data), brand.default_quality)
        validate_request(images, options)
    except ValidationError as e:
        return jsonify({'error': brand.messages.get(e.code, str(e)), 'code': e.code}), 400

    CONVERSION_STATE.update(progress=0, generating=True)
    try:
        pdf_bytes = generate_pdf_from_images(images, options, on_progress=_set_progress, title=brand.title)
    except Exception as e:
        logger.exception("PDF generation failed")
        return jsonify({'error': brand.messages['error_prefix'] + str(e)}), 500
    finally:
        CONVERSION_STATE['generating'] = False

    download_name = brand.download_name(int(time.time() * 1000))
    logger.info(f"Generated {download_name} ({len(pdf_bytes)} bytes, {len(images)} pages)")
    return send_file(io.BytesIO(pdf_bytes), mimetype='application/pdf', as_attachment=True, download_name=download_name)

@app.route('/progress', methods=['GET'])
def progress():
    return jsonify(CONVERSION_STATE)

@app.route('/script', methods=['GET'])
def get_script():
    brand = current_brand()
    return jsonify({
        'filename': 'main.py',
        'code': brand.script,
        'requires': brand.script_requires,
        'docs_label': brand.docs_label,
        'docs_url': brand.docs_url,
    })

@app.route('/script/download', methods=['GET'])
def download_script():
    script = current_brand().script.encode('utf-8')
    return send_file(io.BytesIO(script), mimetype='text/x-python', as_attachment=True, download_name='main.py')

@app.errorhandler(RequestEntityTooLarge)
def too_large(e):
    limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
    return jsonify({'error': f'Upload exceeds the {limit_mb}MB limit'}), 413


# --- FRONTEND TEMPLATE ---
HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ brand.title }}</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>
    <script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>
    <script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>

    <style>
        body { font-family: 'Segoe UI', sans-serif; }
        .code-font { font-family: 'Fira Code', Consolas, monospace; }
        .custom-scrollbar::-webkit-scrollbar { width: 6px; }
        .custom-scrollbar::-webkit-scrollbar-thumb { background: #cbd5e1; border-radius: 3px; }
    </style>
</head>
<body class="bg-slate-50 text-slate-800">
    <div id="root"></div>

    <script>window.BRAND = {{ brand|tojson }};</script>
    <script type="text/babel">
        const { useState, useEffect, useRef } = React;
        const BRAND = window.BRAND;

        // ICONS
        const IconUpload = () => <svg xmlns="http://www.w3.org/2000/svg" width="32" height="32" viewBox="0 0 24 24" fill="none" stroke="currentColor" strokeWidth="2"><path d="M21 15v4a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2v-4"/><polyline points="17 8 12 3 7 8"/><line x1="12" y1="3" x2="12" y2="15"/></svg>;
        const IconTrash = () => <svg xmlns="http://www.w3.org/2000/svg" width="14" height="14" viewBox="0 0 24 24" fill="none" stroke="currentColor" strokeWidth="2"><polyline points="3 6 5 6 21 6"/><path d="M19 6v14a2 2 0 0 1-2 2H7a2 2 0 0 1-2-2V6m3 0V4a2 2 0 0 1 2-2h4a2 2 0 0 1 2 2v2"/></svg>;
        const IconX = () => <svg xmlns="http://www.w3.org/2000/svg" width="18" height="18" viewBox="0 0 24 24" fill="none" stroke="currentColor" strokeWidth="2"><line x1="18" y1="6" x2="6" y2="18"/><line x1="6" y1="6" x2="18" y2="18"/></svg>;

        function FileItem({ image, index, onRemove }) {
            return (
                <div className="flex items-center gap-4 bg-white p-3 rounded-xl border border-slate-200 shadow-sm hover:shadow-md transition">
                    <div className="w-16 h-16 rounded-lg overflow-hidden bg-slate-100 flex-shrink-0 border border-slate-100">
                        <img src={image.preview} alt={image.name} className="w-full h-full object-cover" />
                    </div>
                    <div className="flex-grow min-w-0">
                        <p className="text-sm font-semibold text-slate-700 truncate">{image.name}</p>
                        <p className="text-xs text-slate-400">{(image.size / 1024).toFixed(1)} KB • Image {index + 1}</p>
                    </div>
                    <button onClick={() => onRemove(image.id)} className="p-2 text-slate-400 hover:text-red-500 hover:bg-red-50 rounded-full transition"><IconX /></button>
                </div>
            );
        }

        function CodeViewer() {
            const [script, setScript] = useState(null);
            const [copied, setCopied] = useState(false);

            useEffect(() => {
                fetch('/script').then(r => r.json()).then(setScript).catch(err => console.error(err));
            }, []);

            if (!script) return <div className="text-center text-slate-400">Loading script...</div>;

            const copyToClipboard = () => {
                navigator.clipboard.writeText(script.code);
                setCopied(true);
                setTimeout(() => setCopied(false), 2000);
            };

            return (
                <div className="bg-slate-900 rounded-2xl overflow-hidden shadow-2xl border border-slate-800">
                    <div className="flex items-center justify-between px-6 py-4 bg-slate-800/50 border-b border-slate-700">
                        <span className="text-sm font-medium text-slate-400 code-font">{script.filename}</span>
                        <div className="flex items-center gap-2">
                            <button onClick={copyToClipboard} className="px-3 py-1.5 rounded-lg bg-slate-700 text-slate-200 text-xs font-medium hover:bg-slate-600">{copied ? 'Copied' : 'Copy'}</button>
                            <a href="/script/download" className="px-3 py-1.5 rounded-lg bg-blue-600 text-white text-xs font-medium hover:bg-blue-500">Download</a>
                        </div>
                    </div>
                    <div className="p-6 overflow-auto max-h-[600px] custom-scrollbar">
                        <pre className="code-font text-sm leading-relaxed text-blue-100"><code>{script.code}</code></pre>
                    </div>
                    <div className="px-6 py-4 bg-slate-800/30 border-t border-slate-700 flex items-center gap-4 text-xs text-slate-400">
                        <span>Requires: {script.requires.join(', ')}</span>
                        {script.docs_url && <a href={script.docs_url} target="_blank" rel="noopener noreferrer" className="hover:text-white">{script.docs_label}</a>}
                    </div>
                </div>
            );
        }

        function downloadName(res) {
            const match = /filename="?([^";]+)"?/.exec(res.headers.get('Content-Disposition') || '');
            return match ? match[1] : 'images.pdf';
        }

        function App() {
            const [activeTab, setActiveTab] = useState('converter');
            const [images, setImages] = useState([]);
            const [isGenerating, setIsGenerating] = useState(false);
            const [progress, setProgress] = useState(0);
            const [options, setOptions] = useState(BRAND.defaults);
            const [successMsg, setSuccessMsg] = useState(null);
            const [errorMsg, setErrorMsg] = useState(null);
            const fileInputRef = useRef(null);

            useEffect(() => {
                fetch('/images').then(r => r.json()).then(data => setImages(data.images || []));
            }, []);

            const handleFileChange = async (e) => {
                const files = Array.from(e.target.files || []);
                if (files.length === 0) return;
                const fd = new FormData();
                files.forEach(f => fd.append('files', f));
                try {
                    const res = await fetch('/upload', { method: 'POST', body: fd });
                    const data = await res.json();
                    if (!res.ok) throw new Error(data.error);
                    setImages(prev => [...prev, ...data.images]);
                    setErrorMsg(null);
                } catch (err) { setErrorMsg(err.message); }
                if (fileInputRef.current) fileInputRef.current.value = '';
            };

            const removeImage = async (id) => {
                await fetch(`/images/${id}`, { method: 'DELETE' });
                setImages(prev => prev.filter(img => img.id !== id));
            };

            const clearAll = async () => {
                await fetch('/images', { method: 'DELETE' });
                setImages([]);
                setSuccessMsg(null);
            };

            const handleConvert = async () => {
                if (images.length === 0) return setErrorMsg(BRAND.messages.no_images);
                if (options.passwordProtected && !options.password) return setErrorMsg(BRAND.messages.no_password);

                setIsGenerating(true); setProgress(0); setErrorMsg(null); setSuccessMsg(null);
                const poll = setInterval(() => {
                    fetch('/progress').then(r => r.json()).then(data => setProgress(data.progress)).catch(() => {});
                }, 250);
                try {
                    const res = await fetch('/convert', { method: 'POST', headers: { 'Content-Type': 'application/json' }, body: JSON.stringify({ options }) });
                    if (!res.ok) { const data = await res.json(); throw new Error(data.error); }
                    const blob = await res.blob();
                    const url = window.URL.createObjectURL(blob);
                    const a = document.createElement('a');
                    a.href = url;
                    a.download = downloadName(res);
                    document.body.appendChild(a); a.click(); document.body.removeChild(a);
                    window.URL.revokeObjectURL(url);
                    setProgress(100);
                    setSuccessMsg(BRAND.messages.success);
                } catch (err) { setErrorMsg(err.message); } finally { clearInterval(poll); setIsGenerating(false); }
            };

            const tabClass = (tab) => `px-4 py-2 rounded-lg text-sm font-semibold transition ${activeTab === tab ? 'bg-white text-blue-600 shadow-sm' : 'text-slate-500 hover:text-slate-700'}`;
            const sizeClass = (size) => `px-4 py-2 text-sm font-semibold rounded-xl border transition ${options.pageSize === size ? 'bg-blue-600 text-white border-blue-600' : 'bg-white text-slate-600 border-slate-200 hover:border-slate-300'}`;
            const canConvert = !isGenerating && images.length > 0;

            return (
                <div className="min-h-screen flex flex-col">
                    <header className="bg-white border-b border-slate-200 sticky top-0 z-50">
                        <div className="max-w-7xl mx-auto px-6 flex justify-between items-center h-16">
                            <div>
                                <h1 className="text-xl font-bold text-slate-900 tracking-tight">{BRAND.title}</h1>
                                <p className="text-[10px] uppercase tracking-widest font-bold text-blue-600">{BRAND.tagline}</p>
                            </div>
                            <nav className="flex gap-1 bg-slate-100 p-1 rounded-xl">
                                <button onClick={() => setActiveTab('converter')} className={tabClass('converter')}>Converter</button>
                                <button onClick={() => setActiveTab('code')} className={tabClass('code')}>Python Script</button>
                            </nav>
                        </div>
                    </header>

                    <main className="flex-grow max-w-7xl mx-auto w-full px-6 py-8">
                        {activeTab === 'converter' ? (
                            <div className="grid grid-cols-1 lg:grid-cols-12 gap-8">
                                <div className="lg:col-span-8 space-y-6">
                                    <div onClick={() => fileInputRef.current && fileInputRef.current.click()} className="bg-white rounded-2xl border-2 border-dashed border-slate-200 p-8 text-center hover:border-blue-400 cursor-pointer transition">
                                        <input type="file" ref={fileInputRef} onChange={handleFileChange} multiple accept="image/jpeg,image/png,image/jpg" className="hidden" />
                                        <div className="w-16 h-16 bg-blue-100 text-blue-600 rounded-full flex items-center justify-center mx-auto mb-4"><IconUpload /></div>
                                        <h3 className="text-lg font-bold text-slate-800 mb-1">Upload high-quality images</h3>
                                        <p className="text-sm text-slate-500">Click to browse. Supports JPG, PNG, and JPEG.</p>
                                    </div>

                                    {images.length > 0 ? (
                                        <div className="space-y-4">
                                            <div className="flex items-center justify-between">
                                                <h2 className="text-lg font-bold text-slate-800">Selected Files <span className="bg-slate-100 text-slate-600 text-xs px-2 py-0.5 rounded-full font-mono">{images.length}</span></h2>
                                                <button onClick={clearAll} className="text-sm font-medium text-slate-400 hover:text-red-500 flex items-center gap-1.5"><IconTrash /> Clear All</button>
                                            </div>
                                            <div className="grid grid-cols-1 gap-3 max-h-[500px] overflow-y-auto pr-2 custom-scrollbar">
                                                {images.map((img, idx) => <FileItem key={img.id} image={img} index={idx} onRemove={removeImage} />)}
                                            </div>
                                        </div>
                                    ) : (
                                        <div className="py-20 text-center text-slate-400 text-sm font-medium">No files selected yet</div>
                                    )}
                                </div>

                                <div className="lg:col-span-4">
                                    <div className="bg-white rounded-2xl shadow-sm border border-slate-200 p-6 space-y-8 sticky top-24">
                                        <div className="space-y-4">
                                            <h4 className="text-sm font-bold text-slate-800">Output Settings</h4>
                                            <label className="text-xs font-bold text-slate-500 uppercase tracking-wider block">Page Format</label>
                                            <div className="grid grid-cols-2 gap-2">
                                                <button onClick={() => setOptions(prev => ({ ...prev, pageSize: 'A4' }))} className={sizeClass('A4')}>Standard A4</button>
                                                <button onClick={() => setOptions(prev => ({ ...prev, pageSize: 'Original' }))} className={sizeClass('Original')}>Original</button>
                                            </div>
                                            <label className="text-xs font-bold text-slate-500 uppercase tracking-wider block">Quality Optimization ({Math.round(options.quality * 100)}%)</label>
                                            <input type="range" min="0.1" max="1.0" step="0.1" value={options.quality} onChange={(e) => setOptions(prev => ({ ...prev, quality: parseFloat(e.target.value) }))} className="w-full accent-blue-600" />
                                            <div className="flex justify-between text-[10px] font-bold text-slate-400 uppercase"><span>Smallest File</span><span>High Definition</span></div>
                                        </div>

                                        <div className="pt-6 border-t border-slate-100 space-y-4">
                                            <h4 className="text-sm font-bold text-slate-800">Security &amp; Privacy</h4>
                                            <label className="flex items-center justify-between cursor-pointer">
                                                <span className="text-sm font-medium text-slate-700">Enable Password Protection</span>
                                                <input type="checkbox" checked={options.passwordProtected} onChange={(e) => setOptions(prev => ({ ...prev, passwordProtected: e.target.checked }))} className="w-5 h-5 accent-emerald-500" />
                                            </label>
                                            {options.passwordProtected && (
                                                <input type="password" placeholder="Min. 8 characters" value={options.password || ''} onChange={(e) => setOptions(prev => ({ ...prev, password: e.target.value }))} className="w-full px-4 py-2 text-sm bg-slate-50 border border-slate-200 rounded-xl outline-none focus:border-blue-500" />
                                            )}
                                        </div>

                                        <div className="space-y-4">
                                            {errorMsg && <div className="p-3 bg-red-50 border border-red-100 rounded-xl text-red-600 text-xs font-medium">{errorMsg}</div>}
                                            {successMsg && <div className="p-3 bg-emerald-50 border border-emerald-100 rounded-xl text-emerald-600 text-xs font-medium">{successMsg}</div>}
                                            <button onClick={handleConvert} disabled={!canConvert} className={`w-full py-4 rounded-2xl font-bold transition shadow-lg ${canConvert ? 'bg-blue-600 text-white hover:bg-blue-700' : 'bg-slate-100 text-slate-400 cursor-not-allowed shadow-none'}`}>
                                                {isGenerating ? `Processing (${progress}%)` : 'Generate PDF'}
                                            </button>
                                        </div>
                                    </div>
                                </div>
                            </div>
                        ) : (
                            <div className="max-w-4xl mx-auto space-y-6">
                                <div className="text-center space-y-3 mb-12">
                                    <h2 className="text-3xl font-black text-slate-900">Python Power Tool</h2>
                                    <p className="text-slate-500 max-w-lg mx-auto">{BRAND.script_intro}</p>
                                </div>
                                <CodeViewer />
                            </div>
                        )}
                    </main>
                </div>
            );
        }

        const root = ReactDOM.createRoot(document.getElementById('root'));
        root.render(<App />);
    </script>
</body>
</html>
"""

if __name__ == '__main__':
    host = os.environ.get('IMG2PDF_HOST', '127.0.0.1')
    port = int(os.environ.get('IMG2PDF_PORT', 5000))
    print("Starting Flask Server...")
    print(f"Open http://{host}:{port} in your browser")
    app.run(host=host, port=port, threaded=True)
