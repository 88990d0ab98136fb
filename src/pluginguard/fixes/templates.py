"""Static fix templates keyed by rule id."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FixTemplate:
    title: str
    description: str
    code_example: str
    references: tuple[str, ...]


FIX_TEMPLATES: dict[str, FixTemplate] = {
    "eval-usage": FixTemplate(
        title="Replace eval() with safer alternatives",
        description="eval() can execute arbitrary code and should be avoided",
        code_example="""\
// Instead of:
eval(userInput)

// Use:
JSON.parse(userInput) // for data
// or better yet, use a proper parser library

# Python: parse literals instead of evaluating them
ast.literal_eval(user_input)""",
        references=(
            "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Reference/Global_Objects/eval",
            "https://owasp.org/www-community/attacks/Code_Injection",
        ),
    ),
    "js-sql-injection": FixTemplate(
        title="Use parameterized queries",
        description=(
            "Prevent SQL injection by using parameterized queries or prepared statements"
        ),
        code_example="""\
// Instead of:
const query = "SELECT * FROM users WHERE id = " + userId

// Use:
const query = "SELECT * FROM users WHERE id = ?"
db.query(query, [userId])

// Or with an ORM:
User.findById(userId)""",
        references=(
            "https://owasp.org/www-community/attacks/SQL_Injection",
            "https://cheatsheetseries.owasp.org/cheatsheets/SQL_Injection_Prevention_Cheat_Sheet.html",
        ),
    ),
    "js-command-injection": FixTemplate(
        title="Use execFile() with argument arrays",
        description=(
            "Prevent command injection by avoiding shell commands and using argument arrays"
        ),
        code_example="""\
// Instead of:
exec(`rm -rf ${userInput}`)

// Use:
execFile('rm', ['-rf', userInput], (error, stdout, stderr) => {
  // handle result
})

// Or better yet, validate input and use specific commands""",
        references=(
            "https://owasp.org/www-community/attacks/Command_Injection",
            "https://nodejs.org/api/child_process.html#child_processexecfilefile-args-options-callback",
        ),
    ),
    "js-path-traversal": FixTemplate(
        title="Validate and sanitize file paths",
        description="Prevent directory traversal attacks by validating file paths",
        code_example="""\
// Instead of:
readFile("../" + userInput)

// Use:
const path = require('path')
const safePath = path.resolve('./uploads', path.basename(userInput))
if (!safePath.startsWith(path.resolve('./uploads'))) {
  throw new Error('Invalid file path')
}
readFile(safePath)""",
        references=(
            "https://owasp.org/www-community/attacks/Path_Traversal",
            "https://cheatsheetseries.owasp.org/cheatsheets/File_Upload_Cheat_Sheet.html",
        ),
    ),
    "js-xss-innerhtml": FixTemplate(
        title="Use textContent or sanitize HTML",
        description="Prevent XSS by avoiding innerHTML with user content",
        code_example="""\
// Instead of:
element.innerHTML = userContent

// Use:
element.textContent = userContent

// Or sanitize HTML:
import DOMPurify from 'dompurify'
element.innerHTML = DOMPurify.sanitize(userContent)""",
        references=(
            "https://owasp.org/www-community/attacks/xss/",
            "https://cheatsheetseries.owasp.org/cheatsheets/DOM_based_XSS_Prevention_Cheat_Sheet.html",
        ),
    ),
    "js-weak-crypto": FixTemplate(
        title="Use stronger cryptographic algorithms",
        description=(
            "Replace weak or deprecated cryptographic functions with secure alternatives"
        ),
        code_example="""\
// Instead of:
const hash = crypto.createHash('md5').update(data).digest('hex')

// Use:
const hash = crypto.createHash('sha256').update(data).digest('hex')

// For passwords, use bcrypt:
const bcrypt = require('bcrypt')
const hashedPassword = await bcrypt.hash(password, 12)""",
        references=(
            "https://owasp.org/www-community/controls/Choosing_the_Right_Cryptographic_Algorithm",
            "https://cheatsheetseries.owasp.org/cheatsheets/Password_Storage_Cheat_Sheet.html",
        ),
    ),
    "js-hardcoded-secrets": FixTemplate(
        title="Use environment variables or secure key management",
        description="Never hardcode secrets in source code",
        code_example="""\
// Instead of:
const apiKey = "sk-1234567890abcdef"

// Use:
const apiKey = process.env.API_KEY

// Or use a key management service:
const apiKey = await keyManager.getSecret('api-key')""",
        references=(
            "https://owasp.org/www-community/vulnerabilities/Use_of_hard-coded_password",
            "https://cheatsheetseries.owasp.org/cheatsheets/Secrets_Management_Cheat_Sheet.html",
        ),
    ),
    "js-insecure-random": FixTemplate(
        title="Use cryptographically secure random number generation",
        description="Math.random() is not suitable for security-sensitive operations",
        code_example="""\
// Instead of:
const token = Math.random().toString(36)

// Use:
const crypto = require('crypto')
const token = crypto.randomBytes(32).toString('hex')

// Or for UUIDs:
const token = crypto.randomUUID()""",
        references=(
            "https://owasp.org/www-community/vulnerabilities/Insecure_Randomness",
            "https://nodejs.org/api/crypto.html#cryptorandombytessize-callback",
        ),
    ),
    "js-prototype-pollution": FixTemplate(
        title="Avoid direct prototype manipulation",
        description="Prototype pollution can lead to security vulnerabilities",
        code_example="""\
// Instead of:
obj.__proto__.isAdmin = true

// Use:
const safeObj = Object.create(null)
safeObj.isAdmin = true

// Or use Map for dynamic properties:
const properties = new Map()
properties.set('isAdmin', true)""",
        references=(
            "https://cheatsheetseries.owasp.org/cheatsheets/Prototype_Pollution_Prevention_Cheat_Sheet.html",
            "https://github.com/HoLyVieR/prototype-pollution-nsec18",
        ),
    ),
    "php-sql-injection": FixTemplate(
        title="Use PDO prepared statements",
        description="Never pass request parameters straight into a SQL string",
        code_example="""\
// Instead of:
mysqli_query($conn, "SELECT * FROM users WHERE id = " . $_GET['id']);

// Use:
$stmt = $pdo->prepare('SELECT * FROM users WHERE id = ?');
$stmt->execute([$_GET['id']]);""",
        references=(
            "https://www.php.net/manual/en/pdo.prepared-statements.php",
            "https://cheatsheetseries.owasp.org/cheatsheets/SQL_Injection_Prevention_Cheat_Sheet.html",
        ),
    ),
    "python-sql-injection": FixTemplate(
        title="Pass query parameters to the driver",
        description="Let the database driver bind values instead of formatting the SQL string",
        code_example="""\
# Instead of:
cursor.execute("SELECT * FROM users WHERE id = %s" % user_id)

# Use:
cursor.execute("SELECT * FROM users WHERE id = %s", (user_id,))""",
        references=(
            "https://owasp.org/www-community/attacks/SQL_Injection",
            "https://peps.python.org/pep-0249/#paramstyle",
        ),
    ),
    "python-command-injection": FixTemplate(
        title="Run commands without a shell",
        description="Pass an argument list to subprocess and never build commands from input",
        code_example="""\
# Instead of:
os.system("ping " + input("host: "))

# Use:
host = input("host: ")
subprocess.run(["ping", "-c", "1", host], check=True)""",
        references=(
            "https://owasp.org/www-community/attacks/Command_Injection",
            "https://docs.python.org/3/library/subprocess.html#security-considerations",
        ),
    ),
}
